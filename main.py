import os

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "solo_subtitles_app.app:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "4000")),
        reload=os.getenv("RELOAD", "").lower() in {"1", "true", "yes"},
    )
