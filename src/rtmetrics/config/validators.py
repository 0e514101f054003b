"""
Configuration validation utilities.

This module turns each raw TOML section into its typed configuration
dataclass, applying defaults and range checks.
"""

import logging
from pathlib import Path
from typing import Any, Dict

from ..models.config import (
    AppConfig,
    CollectionConfig,
    IdleConfig,
    OptimizerConfig,
    StorageConfig,
    SummaryConfig,
)
from ..validation import (
    ValidationError,
    validate_boolean,
    validate_optional_string,
    validate_positive_float,
    validate_positive_integer,
)

logger = logging.getLogger(__name__)


def _require_section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ValidationError(f"[{name}] must be a table", field_name=name, value=section)
    return section


def validate_collection_config(collection_data: Dict[str, Any]) -> CollectionConfig:
    """
    Validate and create a CollectionConfig from raw configuration data.

    Args:
        collection_data: Raw `[collection]` table from TOML

    Returns:
        Validated CollectionConfig instance

    Raises:
        ValidationError: If validation fails
    """
    interval_seconds = validate_positive_float(
        collection_data.get("interval_seconds", 60.0),
        min_value=1.0,
        max_value=3600.0,
        field_name="collection.interval_seconds",
    )

    min_uptime_seconds = validate_positive_float(
        collection_data.get("min_uptime_seconds", 30.0),
        min_value=0.0,
        max_value=3600.0,
        field_name="collection.min_uptime_seconds",
    )

    min_ticks = validate_positive_integer(
        collection_data.get("min_ticks", 600),
        min_value=0,
        field_name="collection.min_ticks",
    )

    initial_resolution_seconds = validate_positive_float(
        collection_data.get("initial_resolution_seconds", 300.0),
        min_value=1.0,
        max_value=24 * 3600.0,
        field_name="collection.initial_resolution_seconds",
    )

    fetch_timeout_seconds = validate_positive_float(
        collection_data.get("fetch_timeout_seconds", 10.0),
        min_value=0.1,
        max_value=300.0,
        field_name="collection.fetch_timeout_seconds",
    )

    ext_stats_host = validate_optional_string(
        collection_data.get("ext_stats_host"),
        field_name="collection.ext_stats_host",
    )

    if fetch_timeout_seconds >= interval_seconds:
        logger.warning(
            f"collection.fetch_timeout_seconds ({fetch_timeout_seconds}s) is not shorter than "
            f"collection.interval_seconds ({interval_seconds}s); ticks may overlap their period"
        )

    return CollectionConfig(
        interval_seconds=interval_seconds,
        min_uptime_seconds=min_uptime_seconds,
        min_ticks=min_ticks,
        initial_resolution_seconds=initial_resolution_seconds,
        fetch_timeout_seconds=fetch_timeout_seconds,
        ext_stats_host=ext_stats_host,
    )


def validate_storage_config(storage_data: Dict[str, Any]) -> StorageConfig:
    """
    Validate and create a StorageConfig from raw configuration data.

    Raises:
        ValidationError: If validation fails
    """
    data_dir = storage_data.get("data_dir", "data")
    if not isinstance(data_dir, str) or not data_dir.strip():
        raise ValidationError(
            "storage.data_dir must be a non-empty string",
            field_name="storage.data_dir",
            value=data_dir,
        )

    file_name = storage_data.get("file_name", "stats_svRuntime.json")
    if not isinstance(file_name, str) or not file_name.strip() or Path(file_name).name != file_name:
        raise ValidationError(
            "storage.file_name must be a plain file name",
            field_name="storage.file_name",
            value=file_name,
        )

    save_throttle_seconds = validate_positive_float(
        storage_data.get("save_throttle_seconds", 15.0),
        min_value=0.0,
        max_value=3600.0,
        field_name="storage.save_throttle_seconds",
    )

    return StorageConfig(
        data_dir=Path(data_dir),
        file_name=file_name,
        save_throttle_seconds=save_throttle_seconds,
    )


def validate_summary_config(summary_data: Dict[str, Any]) -> SummaryConfig:
    """Validate and create a SummaryConfig from raw configuration data."""
    window_hours = validate_positive_float(
        summary_data.get("window_hours", 6.0),
        min_value=0.1,
        max_value=24 * 30.0,
        field_name="summary.window_hours",
    )

    min_snapshots = validate_positive_integer(
        summary_data.get("min_snapshots", 36),
        min_value=1,
        field_name="summary.min_snapshots",
    )

    return SummaryConfig(window_hours=window_hours, min_snapshots=min_snapshots)


def validate_optimizer_config(optimizer_data: Dict[str, Any]) -> OptimizerConfig:
    """Validate and create an OptimizerConfig from raw configuration data."""
    full_resolution_hours = validate_positive_float(
        optimizer_data.get("full_resolution_hours", 12.0),
        min_value=1.0,
        max_value=24 * 7.0,
        field_name="optimizer.full_resolution_hours",
    )

    retention_days = validate_positive_float(
        optimizer_data.get("retention_days", 30.0),
        min_value=1.0,
        max_value=3650.0,
        field_name="optimizer.retention_days",
    )

    if retention_days * 24 <= full_resolution_hours:
        raise ValidationError(
            "optimizer.retention_days must cover more than optimizer.full_resolution_hours",
            field_name="optimizer.retention_days",
            value=retention_days,
        )

    return OptimizerConfig(
        full_resolution_hours=full_resolution_hours,
        retention_days=retention_days,
    )


def validate_idle_config(idle_data: Dict[str, Any]) -> IdleConfig:
    """Validate and create an IdleConfig from raw configuration data."""
    enabled = validate_boolean(idle_data.get("enabled", True), field_name="idle.enabled")

    interval_seconds = validate_positive_float(
        idle_data.get("interval_seconds", 60.0),
        min_value=1.0,
        max_value=3600.0,
        field_name="idle.interval_seconds",
    )

    max_idle_minutes = validate_positive_float(
        idle_data.get("max_idle_minutes", 10.0),
        min_value=1.0,
        field_name="idle.max_idle_minutes",
    )

    max_idle_minutes_setup = validate_positive_float(
        idle_data.get("max_idle_minutes_setup", 20.0),
        min_value=1.0,
        field_name="idle.max_idle_minutes_setup",
    )

    return IdleConfig(
        enabled=enabled,
        interval_seconds=interval_seconds,
        max_idle_minutes=max_idle_minutes,
        max_idle_minutes_setup=max_idle_minutes_setup,
    )


def validate_app_config(config_data: Dict[str, Any]) -> AppConfig:
    """
    Validate a whole parsed configuration file.

    Missing sections fall back to their defaults.

    Raises:
        ValidationError: If any section fails validation
    """
    return AppConfig(
        collection=validate_collection_config(_require_section(config_data, "collection")),
        storage=validate_storage_config(_require_section(config_data, "storage")),
        summary=validate_summary_config(_require_section(config_data, "summary")),
        optimizer=validate_optimizer_config(_require_section(config_data, "optimizer")),
        idle=validate_idle_config(_require_section(config_data, "idle")),
    )
