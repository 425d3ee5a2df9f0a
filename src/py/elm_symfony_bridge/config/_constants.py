"""Constants shared by the configuration layers."""

__all__ = (
    "DEFAULT_CONSOLE_PATH",
    "DEFAULT_ELM_ROOT",
    "DEFAULT_OUTPUT_FOLDER",
    "DEFAULT_RELOAD_TRIGGERS",
    "DEFAULT_WATCH_EXTENSIONS",
    "DEFAULT_WATCH_FOLDERS",
    "DEFAULT_WORKER_COMMAND",
    "ELM_VERSIONS",
    "PACKAGE_JSON_KEY",
    "TRUE_VALUES",
)

TRUE_VALUES = {"True", "true", "1", "yes", "Y", "T"}

PACKAGE_JSON_KEY = "elm-symfony-bridge"
"""Key of the explicit configuration block inside ``package.json``."""

ELM_VERSIONS = ("0.18", "0.19")

DEFAULT_ELM_ROOT = "./assets/elm"
DEFAULT_OUTPUT_FOLDER = "./elm-stuff/generated-code/elm-symfony-bridge"
DEFAULT_CONSOLE_PATH = "bin/console"
DEFAULT_WATCH_FOLDERS = ("src", "app", "config", "translations")
DEFAULT_WATCH_EXTENSIONS = ("php", "yaml", "yml", "xml")
DEFAULT_WORKER_COMMAND = ("node", "node_modules/elm-symfony-bridge/worker.js")
DEFAULT_RELOAD_TRIGGERS = ("elm.json", "elm-package.json", "package.json", "composer.json", ".env", ".env.local")
"""Files whose change reloads the configuration before regenerating."""
