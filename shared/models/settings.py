"""Settings that drive a single note-link operation."""

from enum import Enum
from string import Formatter
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from shared.errors import ConfigurationError
from shared.helper.HelperConfig import HelperConfig

DEFAULT_LINK_TEMPLATE = "![[{filename}]]"
LINK_TEMPLATE_FIELDS = ("filename", "document_id", "path", "share_url")
DEFAULT_SHARE_LINK_RETRIES = 5
DEFAULT_BROWSE_PAGE_SIZE = 16


class MissingArtifactPolicy(str, Enum):
    """What to insert when no share link could be obtained for a document."""

    SKIP = "skip"
    LINK = "link"
    EMBED = "embed"


class LinkerSettings(BaseModel):
    """
    Immutable settings snapshot. Server credentials live with the Paperless
    client; these values cover storage and insertion behaviour.
    """

    model_config = ConfigDict(frozen=True)

    storage_path: str = ""
    link_template: str = DEFAULT_LINK_TEMPLATE
    share_link_retries: int = DEFAULT_SHARE_LINK_RETRIES
    missing_artifact_policy: MissingArtifactPolicy = MissingArtifactPolicy.SKIP
    browse_page_size: int = DEFAULT_BROWSE_PAGE_SIZE

    @field_validator("link_template")
    @classmethod
    def check_link_template(cls, v: str) -> str:
        """Only named placeholders that LocalReference.render() fills are allowed."""
        try:
            parsed = list(Formatter().parse(v))
        except ValueError as e:
            raise ValueError(f"Link template '{v}' is malformed: {e}") from e
        for _, field_name, _, _ in parsed:
            if field_name is None:
                continue
            name = field_name.split(".", 1)[0].split("[", 1)[0]
            if name not in LINK_TEMPLATE_FIELDS:
                allowed = ", ".join(f"{{{f}}}" for f in LINK_TEMPLATE_FIELDS)
                raise ValueError(f"Link template '{v}' uses unknown placeholder '{{{field_name}}}'. Allowed: {allowed}.")
        return v

    @field_validator("storage_path")
    @classmethod
    def check_storage_path(cls, v: str) -> str:
        # the storage folder must stay inside the vault
        if ".." in v.replace("\\", "/").split("/"):
            raise ValueError(f"Storage path '{v}' must not contain '..' segments.")
        return v

    @classmethod
    def from_config(cls, helper_config: HelperConfig) -> "LinkerSettings":
        """
        Build the settings from LINKER_* environment variables.

        Raises:
            ConfigurationError: If the link template or storage path is unusable.
        """
        policy = helper_config.get_choice_val(
            "LINKER_MISSING_ARTIFACT_POLICY",
            choices=[p.value for p in MissingArtifactPolicy],
            default=MissingArtifactPolicy.SKIP.value,
        )
        try:
            return cls(
                storage_path=helper_config.get_string_val("LINKER_STORAGE_PATH", default=""),
                link_template=helper_config.get_string_val("LINKER_LINK_TEMPLATE", default=DEFAULT_LINK_TEMPLATE),
                share_link_retries=int(helper_config.get_number_val("LINKER_SHARE_LINK_RETRIES", default=DEFAULT_SHARE_LINK_RETRIES)),
                missing_artifact_policy=MissingArtifactPolicy(policy),
                browse_page_size=int(helper_config.get_number_val("LINKER_BROWSE_PAGE_SIZE", default=DEFAULT_BROWSE_PAGE_SIZE)),
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid linker settings: {e}") from e


def validate_base_url(base_url: str | None) -> str:
    """
    Check that a server base URL is usable and return it without trailing slash.

    Raises:
        ConfigurationError: If the URL is empty, has no http(s) scheme or no host.
    """
    if not base_url or not base_url.strip():
        raise ConfigurationError("Paperless base URL is not configured.")
    parsed = urlparse(base_url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(f"Paperless base URL '{base_url}' is not a valid http(s) URL.")
    return base_url.strip().rstrip("/")
