"""Configuration: environment settings (config.settings) and JSON machine/job defaults (config.machine_config)."""
