"""Validation methods for scoring finished clusterings."""

from typing import Union

from ..base.data_structures import ValidationType
from ..base.interfaces import ValidationMethod
from .davies_bouldin import DaviesBouldinIndex
from .silhouette import SilhouetteScore


def get_validation_method(validation_type: Union[ValidationType, str]) -> ValidationMethod:
    """Create the validation method for ``validation_type``."""
    validation_type = ValidationType.parse(validation_type)
    if validation_type is ValidationType.DBI:
        return DaviesBouldinIndex()
    return SilhouetteScore()


__all__ = [
    'DaviesBouldinIndex',
    'SilhouetteScore',
    'get_validation_method'
]
