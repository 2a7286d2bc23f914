from pydantic import BaseModel


class EnvConfig(BaseModel):
    """
    A single configuration value a client needs from the environment.

    Attributes:
        env_key (str): Key without the client prefix, e.g. "BASE_URL" for "DMS_PAPERLESS_BASE_URL".
        val_type (str): "string", "number", "bool" or "list".
        default: Value used when the variable is not set. None marks the key as required.
    """

    env_key: str
    val_type: str
    default: str | int | bool | list | None = None
