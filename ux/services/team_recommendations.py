# ux/services/team_recommendations.py
"""
Rule-based team-composition advice.

`get_team_recommendations` is a pure function of its inputs: no store access,
no randomness. `recommend_for_team` does the fetching for the API.
"""
from teams.services import get_team_members
from users.services import get_available_users

# A balanced team, in suggestion order
BALANCED_TEAM_ROLES = [
    "Frontend Developer",
    "Backend Developer",
    "UI/UX Designer",
    "Tester",
    "ML Engineer",
    "Full Stack Developer",
    "Mobile Developer",
    "DevOps Engineer",
    "Product Manager",
]

MAX_SUGGESTED_ROLES = 3
MAX_RECOMMENDED_USERS = 3
MAX_REASON_SKILLS = 3

# (keywords, sentence) appended when the team description mentions any keyword
FOCUS_HINTS = [
    (("ai", "ml", "machine learning"), " Given your AI/ML focus, an ML Engineer would be valuable."),
    (("mobile", "app"), " For mobile development, consider a Mobile Developer."),
    (("design", "ux", "user"), " A strong UI/UX Designer would help with user experience."),
]


def _get(obj, name, default=None):
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def get_missing_roles(current_roles):
    """Balanced-team roles not covered by any current role (substring, case-insensitive)."""
    current = [r.lower() for r in current_roles if r]
    return [
        role for role in BALANCED_TEAM_ROLES
        if not any(role.lower() in cr for cr in current)
    ][:MAX_SUGGESTED_ROLES]


def prioritise_roles(roles_needed, missing_roles):
    """Team-declared needs first, then missing roles; deduplicated, capped."""
    if not roles_needed:
        return missing_roles

    ordered = list(dict.fromkeys(list(roles_needed) + list(missing_roles)))
    return ordered[:MAX_SUGGESTED_ROLES]


def role_matches(user_role, wanted_role):
    user_role = (user_role or "").lower()
    wanted_role = wanted_role.lower()
    return wanted_role in user_role or user_role in wanted_role


def build_reason(user):
    skills = _get(user, "skills") or []
    names = [_get(s, "name") for s in skills[:MAX_REASON_SKILLS]]
    listed = ", ".join(n for n in names if n) or "various technologies"
    return f"Matches needed role: {_get(user, 'primary_role')}. Skills include {listed}."


def build_explanation(roles, description):
    explanation = "Based on your team composition, "

    if roles:
        explanation += f"we recommend filling these roles to have a well-rounded team: {', '.join(roles)}."
    else:
        explanation += "your team seems well-balanced! Consider adding specialized roles based on your project needs."

    if description:
        desc = description.lower()
        for keywords, hint in FOCUS_HINTS:
            if any(k in desc for k in keywords):
                explanation += hint

    return explanation


def get_team_recommendations(team, current_members, available_users):
    """
    Suggest roles to fill and up to three candidates for them.

    Args:
        team: Team (or dict) with `roles_needed` and `description`
        current_members: iterable of roster entries, each with a `role`
        available_users: profiles not on any team

    Returns:
        {"missing_roles": [...], "recommended_users": [{"user", "reason"}], "explanation": str}
    """
    current_roles = [_get(m, "role") or "" for m in current_members]
    missing = get_missing_roles(current_roles)
    roles = prioritise_roles(_get(team, "roles_needed") or [], missing)

    recommended = []
    for user in available_users:
        if len(recommended) >= MAX_RECOMMENDED_USERS:
            break
        # An empty role would substring-match every wanted role
        if not _get(user, "primary_role"):
            continue
        if any(role_matches(_get(user, "primary_role"), role) for role in roles):
            recommended.append({"user": user, "reason": build_reason(user)})

    return {
        "missing_roles": roles,
        "recommended_users": recommended,
        "explanation": build_explanation(roles, _get(team, "description")),
    }


def recommend_for_team(team, exclude_user_id=None):
    """Fetch the roster and the available pool, then run the heuristic."""
    return get_team_recommendations(
        team,
        get_team_members(team.pk),
        get_available_users(exclude_user_id=exclude_user_id),
    )
