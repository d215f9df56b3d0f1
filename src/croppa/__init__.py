from .config import CroppaConfig, load_config
from .errors import (
    ConflictingOptions,
    CropLimitExceeded,
    CroppaError,
    DestinationNotWritable,
    DimensionsUnreadable,
    ImageTooLarge,
    InvalidOptionArguments,
    InvalidQuadrant,
    MissingDimensionForOption,
    SourceNotFound,
    UnlinkFailed,
)
from .image_processing.lifecycle import DerivedFileManager
from .image_processing.policy import CropEngine, CropPlan, EngineConfig, Operation, Trim, TrimMode, plan_crop
from .media.resolver import SourceResolver
from .media.store import DerivedStore, FilesystemStore
from .models import DerivedRequest, OptionSet, PassThrough, Served, SourceImage
from .service import Croppa
from .urls.options import parse_options
from .urls.schema import build_url, decode, encode

__all__ = [
    "Croppa",
    "CroppaConfig",
    "load_config",
    "CroppaError",
    "ConflictingOptions",
    "CropLimitExceeded",
    "DestinationNotWritable",
    "DimensionsUnreadable",
    "ImageTooLarge",
    "InvalidOptionArguments",
    "InvalidQuadrant",
    "MissingDimensionForOption",
    "SourceNotFound",
    "UnlinkFailed",
    "DerivedFileManager",
    "CropEngine",
    "CropPlan",
    "EngineConfig",
    "Operation",
    "Trim",
    "TrimMode",
    "plan_crop",
    "SourceResolver",
    "DerivedStore",
    "FilesystemStore",
    "DerivedRequest",
    "OptionSet",
    "PassThrough",
    "Served",
    "SourceImage",
    "parse_options",
    "build_url",
    "decode",
    "encode",
]
