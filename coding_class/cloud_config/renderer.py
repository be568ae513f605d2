"""Jinja2 rendering of the cloud-init boot configuration.

Provides the CloudConfigRenderer class which loads the bundled
``cloud-config.yaml.j2`` template (or any inline template string) and fills
its five placeholders from a ``CloudConfigValues`` model.  Placeholders use
plain ``{{NAME}}`` syntax, so Jinja2 replaces every occurrence; an unknown
name raises instead of rendering empty.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    UndefinedError,
    select_autoescape,
)
from pydantic import BaseModel, ConfigDict, Field

from coding_class.config import Config
from coding_class.errors import ConfigurationError, TemplateRenderError
from coding_class.models import CredentialSet


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

DEFAULT_TEMPLATE = "cloud-config.yaml.j2"

CLOUD_CONFIG_HEADER = "#cloud-config"

# Matches the ``ssh_authorized_keys:`` list in the bundled template.
KEY_INDENT = " " * 6

NO_KEYS_COMMENT = f"{KEY_INDENT}# no SSH keys configured"


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------

class CloudConfigValues(BaseModel):
    """The closed set of values a boot configuration may reference."""

    model_config = ConfigDict(frozen=True)

    admin_name: str = Field(..., min_length=1)
    admin_password: str = Field(..., min_length=1)
    mentee_password: str = Field(..., min_length=1)
    vnc_password: str = Field(..., min_length=1)
    ssh_authorized_keys: tuple[str, ...] = Field(default=())

    @classmethod
    def build(cls, config: Config, credentials: CredentialSet) -> "CloudConfigValues":
        """Combine configuration and fresh credentials.

        Raises:
            ConfigurationError: If the admin name is not configured.
        """
        admin_name = config.admin.name.strip()
        if not admin_name:
            raise ConfigurationError(
                "Missing configuration: admin.name", missing=["admin.name"]
            )
        return cls(
            admin_name=admin_name,
            admin_password=credentials.admin,
            mentee_password=credentials.mentee,
            vnc_password=credentials.vnc,
            ssh_authorized_keys=tuple(config.admin.ssh_keys),
        )

    def as_context(self) -> dict[str, Any]:
        """Return the placeholder name -> substituted text mapping."""
        return {
            "ADMIN_NAME": self.admin_name,
            "ADMIN_PASSWORD": self.admin_password,
            "MENTEE_PASSWORD": self.mentee_password,
            "VNC_PASSWORD": self.vnc_password,
            "SSH_AUTHORIZED_KEYS": format_ssh_keys(self.ssh_authorized_keys),
        }


def format_ssh_keys(keys: tuple[str, ...] | list[str]) -> str:
    """Format public keys as YAML list items at the template's indentation.

    Blank entries and ``#`` comments are dropped.  When nothing is left a
    single comment line is returned so the surrounding YAML stays valid.

    Examples::

        format_ssh_keys(["key-a", "key-b"]) -> "      - key-a\\n      - key-b"
        format_ssh_keys([])                 -> "      # no SSH keys configured"
    """
    usable = [k.strip() for k in keys if k and k.strip() and not k.strip().startswith("#")]
    if not usable:
        return NO_KEYS_COMMENT
    return "\n".join(f"{KEY_INDENT}- {key}" for key in usable)


# ---------------------------------------------------------------------------
# CloudConfigRenderer
# ---------------------------------------------------------------------------

class CloudConfigRenderer:
    """Renders boot configurations for new workstations.

    Rendering is a pure function of the template text and the values; the
    renderer holds no per-call state.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )

    # -- Rendering ---------------------------------------------------------

    def render(self, values: CloudConfigValues, template_name: str = DEFAULT_TEMPLATE) -> str:
        """Render a template file and verify the result is a cloud-config document.

        Raises:
            TemplateRenderError: If the template is missing, references an
                unknown placeholder, or does not produce a YAML mapping.
        """
        try:
            template = self.env.get_template(template_name)
            rendered = template.render(**values.as_context())
        except UndefinedError as exc:
            raise TemplateRenderError(f"Unresolved placeholder in {template_name}: {exc}") from exc
        except TemplateError as exc:
            raise TemplateRenderError(f"Cannot render {template_name}: {exc}") from exc
        validate_cloud_config(rendered)
        return rendered

    def render_string(self, template_string: str, values: CloudConfigValues) -> str:
        """Render an inline template string.

        No document validation is applied, so fragments can be rendered too.
        """
        try:
            return self.env.from_string(template_string).render(**values.as_context())
        except UndefinedError as exc:
            raise TemplateRenderError(f"Unresolved placeholder: {exc}") from exc
        except TemplateError as exc:
            raise TemplateRenderError(f"Cannot render template: {exc}") from exc


def validate_cloud_config(document: str) -> dict[str, Any]:
    """Check that *document* is a ``#cloud-config`` YAML mapping and return it parsed."""
    if not document.startswith(CLOUD_CONFIG_HEADER):
        raise TemplateRenderError(f"Rendered document does not start with {CLOUD_CONFIG_HEADER}")
    try:
        parsed = yaml.safe_load(document)
    except yaml.YAMLError as exc:
        raise TemplateRenderError(f"Rendered cloud-config is not valid YAML: {exc}") from exc
    if not isinstance(parsed, dict):
        raise TemplateRenderError("Rendered cloud-config is not a YAML mapping")
    return parsed
