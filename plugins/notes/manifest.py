"""Manifest for the Notes plugin."""

PLUGIN_MANIFEST = {
    "pluginId": "notes",
    "packageName": "navgate-plugin-notes",
    "displayName": "Notes",
    "version": "1.2.0",
    "tier": "B",
    "module": "plugins.notes.plugin",
    "requestedCapabilities": [
        {"capability": "ui:filter:nav", "reason": "Adds the Notes section"},
        {"capability": "app:routes", "reason": "Serves the notes API"},
        {"capability": "app:db:read", "reason": "Reads notes"},
        {"capability": "app:db:write", "reason": "Stores notes"},
        {"capability": "app:authz", "reason": "Resolves notes.* abilities"},
    ],
    "authzNamespace": "notes.",
    "hooks": [
        {"hook": "ui:nav:main", "handler": "add_notes_nav"},
        {"hook": "user:logout", "handler": "forget_drafts"},
    ],
}
