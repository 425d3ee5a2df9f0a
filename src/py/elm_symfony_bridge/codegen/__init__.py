"""Generation of the Elm routing and translation modules.

The pipeline entry points are :class:`GenerationPipeline` and its
:class:`GenerationContext`; the routing and translation tasks and the file
output helpers are exposed for integrations that need finer control.
"""

from elm_symfony_bridge.codegen._pipeline import GenerationContext, GenerationPipeline
from elm_symfony_bridge.codegen._result import GenerationResult
from elm_symfony_bridge.codegen._routing import ROUTING_CACHE_KEY, ROUTING_MODULE, generate_routing
from elm_symfony_bridge.codegen._translations import (
    catalog_name,
    find_translation_files,
    generate_translations,
    translate_file,
    translation_cache_key,
)
from elm_symfony_bridge.codegen._utils import fmt_path, write_if_changed

__all__ = (
    "ROUTING_CACHE_KEY",
    "ROUTING_MODULE",
    "GenerationContext",
    "GenerationPipeline",
    "GenerationResult",
    "catalog_name",
    "find_translation_files",
    "fmt_path",
    "generate_routing",
    "generate_translations",
    "translate_file",
    "translation_cache_key",
    "write_if_changed",
)
