"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "config.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Test configuration template for postback-tester.
# Replace every <REQUIRED> placeholder before running list-postbacks, preview or test.
# Replace <OPTIONAL> placeholders only when your setup needs them.

catalog:
  # Choose exactly one catalog source (inline or backend).
  inline:
    houses:
      - id: 1
        name: "<REQUIRED>"
        # Appended to every postback URL of this house as the token query parameter.
        security_token: "<OPTIONAL>"
    postbacks:
      - id: 1
        house_id: 1
        name: "<OPTIONAL>"
        event_type: "<REQUIRED>"
        # Placeholders such as {subid} or {amount} are filled with test values.
        url: "<REQUIRED>"
        is_active: true
  # backend:
  #   base_url: "<REQUIRED>"
  #   headers:
  #     Cookie: "<OPTIONAL>"
  #   timeout_seconds: "<OPTIONAL>"
  #   stale_seconds: "<OPTIONAL>"
  #   refresh_interval_seconds: "<OPTIONAL>"

tester:
  timeout_seconds: "<OPTIONAL>"
  user_agent: "<OPTIONAL>"
  log_capacity: "<OPTIONAL>"
  # default substitutes a test value, reject fails, keep sends {name} verbatim.
  unresolved_placeholders: "<OPTIONAL>"

# Placeholder values applied to every test; quote numeric values.
parameters:
  subid: "<OPTIONAL>"
"""


def build_placeholder_configuration() -> str:
    """Build a YAML test configuration template with placeholders and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the placeholder test configuration template to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Test configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
