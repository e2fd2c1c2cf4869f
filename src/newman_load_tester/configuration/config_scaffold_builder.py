"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "load-test.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Load test configuration template for newman-load-tester.
# Replace every <REQUIRED> placeholder before running trigger, drain or run.
# Replace <OPTIONAL> placeholders only when your setup needs them.

aws:
  region: "<OPTIONAL>"
  max_attempts: "<OPTIONAL>"

queue:
  # Choose the run event queue backend (sqs or kafka).
  backend: sqs
  # SQS queue URL; required for the sqs backend.
  url: "<REQUIRED>"
  # SQS long-poll wait between 0 and 20 seconds.
  wait_time_seconds: "<OPTIONAL>"
  # kafka:
  #   bootstrap_servers:
  #     - "<REQUIRED>"
  #   topic: "<REQUIRED>"
  #   group_id: "<OPTIONAL>"
  #   security:
  #     sasl.username: "<OPTIONAL>"
  #     sasl.password: "<OPTIONAL>"
  #   timeout_seconds: "<OPTIONAL>"
  #   poll_interval_ms: "<OPTIONAL>"
  #   auto_offset_reset: "<OPTIONAL>"

storage:
  # S3 bucket holding collection and environment definitions referenced by path.
  bucket: "<OPTIONAL>"

metrics:
  namespace: "<OPTIONAL>"
  dimension_name: "<OPTIONAL>"

runner:
  command: "<OPTIONAL>"
  scratch_dir: "<OPTIONAL>"
  parallelism: "<OPTIONAL>"
  postman_api_host: "<OPTIONAL>"
  timeout_ms: "<OPTIONAL>"

# Omit throughput to leave consumer concurrency and batch size untouched.
throughput:
  function_name: "<REQUIRED>"
  event_source_mapping_uuid: "<REQUIRED>"
  default_batch_size: "<OPTIONAL>"

# Omit dashboard when no CloudWatch dashboard should be linked or updated.
dashboard:
  name: "<REQUIRED>"
"""


def build_placeholder_configuration() -> str:
    """Build a YAML load test configuration template with placeholders and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the placeholder configuration template to the requested output path.

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
        raise FileExistsError(f"Configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
