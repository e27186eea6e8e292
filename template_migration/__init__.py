"""
Template Migration Service

Moves email templates from HubSpot into Salesforce Marketing Cloud
Content Builder.

Supports:
- Inline or stored credentials for both systems
- Fetching through several HubSpot API generations with fallback
- HubL to Content Builder conversion (personalization, slots, channels)
- Caller-supplied template lists
"""

__version__ = "0.1.0"
