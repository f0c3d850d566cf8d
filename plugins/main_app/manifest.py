"""Manifest for the Main App design-owner plugin."""

PLUGIN_MANIFEST = {
    "pluginId": "main_app",
    "packageName": "navgate-plugin-main-app",
    "displayName": "Main App",
    "version": "1.0.0",
    "tier": "design-owner",
    "module": "plugins.main_app.plugin",
    "requestedCapabilities": [
        {"capability": "ui:design:global", "reason": "Owns the application shell"},
        {"capability": "ui:nav:baseline", "reason": "Provides the baseline navigation"},
        {"capability": "ui:filter:nav", "reason": "Adds the billing section for paying tenants"},
    ],
    "hooks": [
        {"hook": "ui:nav:main", "handler": "add_billing_section", "priority": 0},
    ],
}
