from .contrasts import (
    Contrasts,
    ContrastsRegistry,
    CustomContrasts,
    DummyContrasts,
    EffectsContrasts,
    FullDummyContrasts,
    HelmertContrasts,
)
from .contrasts_matrix import ContrastsMatrix, build, revalidate, to_full_rank
from .utils.levels import get_levels
from .utils.sentinels import UNSET

from ._version import __author__, __author_email__, __version__, __version_tuple__

contr = ContrastsRegistry

__all__ = [
    "__author__",
    "__author_email__",
    "__version__",
    "__version_tuple__",
    "build",
    "revalidate",
    "to_full_rank",
    "get_levels",
    "contr",
    "Contrasts",
    "ContrastsMatrix",
    "ContrastsRegistry",
    "CustomContrasts",
    "DummyContrasts",
    "EffectsContrasts",
    "FullDummyContrasts",
    "HelmertContrasts",
    "UNSET",
]
