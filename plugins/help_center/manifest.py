"""Manifest for the Help Center plugin."""

PLUGIN_MANIFEST = {
    "pluginId": "help_center",
    "packageName": "navgate-plugin-help-center",
    "displayName": "Help Center",
    "version": "0.3.0",
    "tier": "A",
    "module": "plugins.help_center.plugin",
    "requestedCapabilities": [
        {"capability": "ui:filter:nav", "reason": "Links the documentation from the user menu"},
        {"capability": "ui:slot:footer", "reason": "Shows the support link in the footer"},
    ],
    "hooks": [
        {"hook": "ui:user:menu", "handler": "add_help_link", "priority": 75},
    ],
}
