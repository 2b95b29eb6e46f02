from ._dev_utils import configure_logging, get_func_name, log_debug
from ._errors import (
    BindError,
    BindingError,
    ConversionError,
    ConverterNotFoundError,
    CreationError,
    InvalidPropertyNameError,
    NoSuchElementError,
    PlaceholderResolutionError,
    RegistryError,
    RegistryLookupError,
    UnboundElementsError,
    get_type_name,
)
from ._types import (
    get_type_arguments,
    is_aggregate_type,
    is_array_type,
    is_collection_type,
    is_data_object_type,
    is_map_type,
    is_scalar_type,
    is_unbindable_type,
    resolve_type,
    unwrap_type,
)
