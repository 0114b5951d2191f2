from .arm import ArmProvider
from .common import MappingProvider
from .idsmoe import IdsMoeProvider
from .opensubtitles import OpenSubtitlesClient

__all__ = [
    "ArmProvider",
    "IdsMoeProvider",
    "MappingProvider",
    "OpenSubtitlesClient",
]
