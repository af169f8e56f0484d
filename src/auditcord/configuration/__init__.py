"""
Configuration management for Auditcord.

- **app_configuration.py**: YAML loader for global settings (channel names,
  completion endpoints, retry budget, model shortcuts, Mermaid CLI). Falls
  back to defaults on missing or malformed config files.

- **completion_settings.py**: Typed accessors for the ``completion`` section.

- **env_settings.py**: Credentials and deployment values read from the
  environment (populated from ``.env`` by python-dotenv at startup).
"""
