# Top-level error and warning classes


class CatcodeError(Exception):
    pass


class CatcodeWarning(Warning):
    pass


# Contrasts specification errors


class ContrastsSpecificationError(CatcodeError):
    pass


class UninstantiatedConfigError(ContrastsSpecificationError):
    """
    A `Contrasts` class was provided where a `Contrasts` instance was expected.
    """


class MatrixSizeError(ContrastsSpecificationError):
    """
    A contrasts matrix does not have the shape required by the number of
    levels being coded.
    """


class DuplicateLevelError(ContrastsSpecificationError):
    """
    A level appears more than once in a level list.
    """


# Level resolution errors


class LevelResolutionError(CatcodeError):
    pass


class LevelTypeMismatchError(LevelResolutionError):
    """
    The configured levels are not of the same type as the levels in the data.
    """


class LevelSetMismatchError(LevelResolutionError):
    """
    The configured levels and the levels in the data are not the same set.
    """


class EmptyLevelSetError(LevelResolutionError):
    pass


class SingleLevelError(LevelResolutionError):
    pass


class BaseLevelNotFoundError(LevelResolutionError):
    """
    The nominated base level is not among the resolved levels.
    """


class LevelSubsetError(LevelResolutionError):
    """
    New data has levels that were not present when the contrasts were built.
    """


# Data warnings


class DataMismatchWarning(CatcodeWarning):
    pass
