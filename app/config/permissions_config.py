"""
Permissions and Roles Configuration
This config defines the permission matrix for every dashboard module and the default roles.
Used by the seed script, the permission evaluator and the /auth endpoints.
"""

SUPER_ADMIN_ROLE = "super_admin"

# Define modules and their actions
MODULES = {
    "dashboard": {
        "actions": ["view"],
        "display_name": "Dashboard",
        "description": "Dashboard overview"
    },
    "analytics": {
        "actions": ["view"],
        "display_name": "Analytics",
        "description": "Content and activity analytics"
    },
    "events": {
        "actions": ["view", "create", "edit", "delete", "publish"],
        "display_name": "Events",
        "description": "Mall event management"
    },
    "posts": {
        "actions": ["view", "create", "edit", "delete", "publish"],
        "display_name": "Blog Posts",
        "description": "Blog post management"
    },
    "promotions": {
        "actions": ["view", "create", "edit", "delete", "publish"],
        "display_name": "Promotions",
        "description": "Tenant promotion management"
    },
    "tenants": {
        "actions": ["view", "create", "edit", "delete", "feature"],
        "display_name": "Tenants",
        "description": "Tenant directory management"
    },
    "whats_on": {
        "actions": ["view", "manage"],
        "display_name": "What's On",
        "description": "Homepage What's On feed"
    },
    "featured_restaurants": {
        "actions": ["view", "manage"],
        "display_name": "Featured Restaurants",
        "description": "Homepage featured restaurants"
    },
    "contacts": {
        "actions": ["view", "respond", "delete"],
        "display_name": "Contacts",
        "description": "Visitor contact enquiries"
    },
    "vip_tiers": {
        "actions": ["view", "create", "edit", "delete"],
        "display_name": "VIP Tiers",
        "description": "VIP card tier management"
    },
    "admin_users": {
        "actions": ["view", "create", "edit", "delete", "manage_roles"],
        "display_name": "Admin Users",
        "description": "Dashboard user management"
    },
    "admin_roles": {
        "actions": ["view", "create", "edit", "delete"],
        "display_name": "Admin Roles",
        "description": "Role and permission management"
    },
    "activity_logs": {
        "actions": ["view"],
        "display_name": "Activity Logs",
        "description": "Audit trail of admin actions"
    },
}

ACTION_DISPLAY_NAMES = {
    "view": "View",
    "create": "Create",
    "edit": "Edit",
    "delete": "Delete",
    "publish": "Publish",
    "manage": "Manage",
    "manage_roles": "Manage Roles",
    "respond": "Respond",
    "feature": "Feature",
}

# Role definitions; "*" grants every action of the module
ROLE_TYPES = {
    SUPER_ADMIN_ROLE: {
        "display_name": "Super Admin",
        "color": "#DC2626",
        "description": "Unrestricted access to every module",
        "permissions": {}
    },
    "content_manager": {
        "display_name": "Content Manager",
        "color": "#8B5CF6",
        "description": "Manages events, blog, promotions and homepage content",
        "permissions": {
            "dashboard": ["view"],
            "analytics": ["view"],
            "events": ["*"],
            "posts": ["*"],
            "promotions": ["*"],
            "whats_on": ["*"],
            "featured_restaurants": ["*"],
            "tenants": ["view"],
        }
    },
    "operations_manager": {
        "display_name": "Operations Manager",
        "color": "#3B82F6",
        "description": "Manages tenants, contacts and VIP tiers",
        "permissions": {
            "dashboard": ["view"],
            "analytics": ["view"],
            "tenants": ["*"],
            "contacts": ["*"],
            "vip_tiers": ["*"],
            "activity_logs": ["view"],
        }
    },
    "leasing_manager": {
        "display_name": "Leasing Manager",
        "color": "#10B981",
        "description": "Maintains tenant records and reviews promotions",
        "permissions": {
            "dashboard": ["view"],
            "tenants": ["view", "create", "edit"],
            "promotions": ["view"],
        }
    },
    "viewer": {
        "display_name": "Viewer",
        "color": "#6B7280",
        "description": "Read-only access",
        "permissions": {module_name: ["view"] for module_name in MODULES}
    },
}

# Display order used to pick a user's highest role
ROLE_HIERARCHY = [
    SUPER_ADMIN_ROLE,
    "content_manager",
    "operations_manager",
    "leasing_manager",
    "viewer",
]

MANAGEMENT_ROLES = [
    SUPER_ADMIN_ROLE,
    "content_manager",
    "operations_manager",
    "leasing_manager",
]

# Dashboard routes and the permission each one requires
ROUTE_PERMISSIONS = {
    "/": ("dashboard", "view"),
    "/events": ("events", "view"),
    "/events/create": ("events", "create"),
    "/events/[id]": ("events", "edit"),
    "/promotions": ("promotions", "view"),
    "/promotions/create": ("promotions", "create"),
    "/promotions/[id]": ("promotions", "edit"),
    "/blog": ("posts", "view"),
    "/blog/create": ("posts", "create"),
    "/blog/[id]": ("posts", "edit"),
    "/homepage": ("whats_on", "view"),
    "/homepage/whats-on": ("whats_on", "view"),
    "/homepage/restaurants": ("featured_restaurants", "view"),
    "/tenants": ("tenants", "view"),
    "/tenants/create": ("tenants", "create"),
    "/tenants/[id]": ("tenants", "edit"),
    "/contacts": ("contacts", "view"),
    "/contacts/[id]": ("contacts", "view"),
    "/admin-users": ("admin_users", "view"),
    "/admin-users/[id]": ("admin_users", "edit"),
    "/admin-users/roles": ("admin_roles", "view"),
    "/vip": ("vip_tiers", "view"),
    "/vip/tiers/create": ("vip_tiers", "create"),
    "/vip/tiers/[id]": ("vip_tiers", "edit"),
    "/audit-logs": ("activity_logs", "view"),
    "/profile": ("dashboard", "view"),
}


def expand_actions(module_name: str, actions: list) -> list:
    """Resolve "*" to the module's full action list, dropping unknown actions."""
    module_actions = MODULES[module_name]["actions"]
    if "*" in actions:
        return list(module_actions)
    return [a for a in actions if a in module_actions]


# Generate permission matrix
def get_permission_matrix():
    """
    Returns a dictionary with all permissions and the default roles
    Format: {
        "permissions": [
            {"name": "events.create", "module": "events", "action": "create",
             "display_name": "Create Events", "description": "..."},
            ...
        ],
        "roles": [
            {
                "name": "content_manager",
                "display_name": "Content Manager",
                "description": "...",
                "color": "#8B5CF6",
                "sort_order": 2,
                "permissions": ["events.create", "events.view", ...]
            },
            ...
        ]
    }
    """
    permissions = []
    roles = []

    for module_name, module_config in MODULES.items():
        for action in module_config["actions"]:
            display_name = f"{ACTION_DISPLAY_NAMES[action]} {module_config['display_name']}"
            permissions.append({
                "name": f"{module_name}.{action}",
                "module": module_name,
                "action": action,
                "display_name": display_name,
                "description": f"{display_name} ({module_config['description']})"
            })

    for sort_order, (role_name, role_config) in enumerate(ROLE_TYPES.items(), start=1):
        role_permissions = []
        for module_name, actions in role_config["permissions"].items():
            for action in expand_actions(module_name, actions):
                role_permissions.append(f"{module_name}.{action}")

        roles.append({
            "name": role_name,
            "display_name": role_config["display_name"],
            "description": role_config["description"],
            "color": role_config["color"],
            "sort_order": sort_order,
            "permissions": sorted(role_permissions)
        })

    return {
        "permissions": permissions,
        "roles": roles
    }


ALL_PERMISSION_NAMES = sorted(f"{m}.{a}" for m, cfg in MODULES.items() for a in cfg["actions"])

# Export the matrix for use in seed scripts
PERMISSION_MATRIX = get_permission_matrix()
