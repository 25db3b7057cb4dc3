"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any

VALID_SORT_KEYS = ("probability", "volume")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_upstream_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate upstream parameters."""
        errors = []

        for key in ("base_url", "event_url_base"):
            if key in params:
                value = params[key]
                if not isinstance(value, str) or not value.startswith(("http://", "https://")):
                    errors.append(ValidationError(
                        field=key,
                        message="Must be an http(s) URL",
                        value=value
                    ))

        if "fetch_limit" in params:
            value = params["fetch_limit"]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="fetch_limit",
                    message="Must be a positive integer",
                    value=value
                ))

        if "timeout_seconds" in params:
            value = params["timeout_seconds"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="timeout_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_refresh_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate refresh cadence parameters."""
        errors = []

        for key in ("order_book_interval_seconds", "markets_interval_seconds",
                    "tick_timeout_seconds"):
            if key in params:
                value = params[key]
                if not _is_number(value) or value <= 0:
                    errors.append(ValidationError(
                        field=key,
                        message="Must be a positive number",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_ranking_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate ranking parameters."""
        errors = []

        if "default_limit" in params:
            value = params["default_limit"]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="default_limit",
                    message="Must be a positive integer",
                    value=value
                ))

        if "default_sort" in params:
            value = params["default_sort"]
            if value not in VALID_SORT_KEYS:
                errors.append(ValidationError(
                    field="default_sort",
                    message=f"Must be one of {', '.join(VALID_SORT_KEYS)}",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_orderbook_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate order book parameters."""
        errors = []

        if "depth_levels" in params:
            value = params["depth_levels"]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="depth_levels",
                    message="Must be a positive integer",
                    value=value
                ))

        if "whale_depth_threshold" in params:
            value = params["whale_depth_threshold"]
            if not _is_number(value) or not 0 < value <= 1:
                errors.append(ValidationError(
                    field="whale_depth_threshold",
                    message="Must be a number in (0, 1]",
                    value=value
                ))

        if "whale_min_notional" in params:
            value = params["whale_min_notional"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field="whale_min_notional",
                    message="Must be a non-negative number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate logging parameters."""
        errors = []

        if "level" in params:
            value = params["level"]
            if not isinstance(value, str) or value.upper() not in VALID_LOG_LEVELS:
                errors.append(ValidationError(
                    field="level",
                    message=f"Must be one of {', '.join(VALID_LOG_LEVELS)}",
                    value=value
                ))

        if "format_json" in params and not isinstance(params["format_json"], bool):
            errors.append(ValidationError(
                field="format_json",
                message="Must be a boolean",
                value=params["format_json"]
            ))

        return errors

    @classmethod
    def validate_config(cls, config: dict[str, Any]) -> list[ValidationError]:
        """Validate a complete merged configuration dictionary."""
        errors = []

        errors.extend(cls.validate_upstream_params(config.get("upstream", {})))
        errors.extend(cls.validate_refresh_params(config.get("refresh", {})))
        errors.extend(cls.validate_ranking_params(config.get("ranking", {})))
        errors.extend(cls.validate_orderbook_params(config.get("orderbook", {})))
        errors.extend(cls.validate_logging_params(config.get("logging", {})))

        return errors
