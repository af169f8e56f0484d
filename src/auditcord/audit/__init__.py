"""
Audit-log notification pipeline for Auditcord.

- **notification_templates.py**: The static table binding each gateway event
  kind to its guild extraction rule, audit action and renderer.

- **event_pipeline.py**: Generic dispatch of a gateway event through the table.

- **audit_correlator.py**: Single most-recent audit-log lookup per event.

- **notification_dispatcher.py**: Renders and sends to the warning channel.
"""
