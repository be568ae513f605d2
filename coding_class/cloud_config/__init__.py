"""Boot configuration rendering for coding class workstations.

Quick usage::

    from coding_class.cloud_config import CloudConfigRenderer, CloudConfigValues

    values = CloudConfigValues.build(config, credentials)
    user_data = CloudConfigRenderer().render(values)
"""

from coding_class.cloud_config.renderer import (
    CloudConfigRenderer,
    CloudConfigValues,
    format_ssh_keys,
    validate_cloud_config,
)

__all__ = [
    "CloudConfigRenderer",
    "CloudConfigValues",
    "format_ssh_keys",
    "validate_cloud_config",
]
