"""
Configuration loading for Modwarden.

- **app_configuration.py**: YAML app config (``config/app_config.yml``) with
  typed shortcuts for the store, maintenance, trust and moderation sections.
- **trust_settings.py**: ``TrustConfig``, the coerced trust policy knobs.
- **moderation_settings.py**: base warning/mute/message limits.
"""
