"""
The gitmoji reference table.

Gitmojis are emoji prefixes that mark the category of a commit. The table
and the category map below are fixed lookup data; the helpers only filter
them and never modify anything.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping, NamedTuple, Optional, Tuple


class Gitmoji(NamedTuple):
    emoji: str
    code: str
    name: str
    description: str


class UnknownCategoryError(KeyError):
    """Raised when filtering by a category that is not in :data:`CATEGORIES`."""

    def __init__(self, category: str) -> None:
        super().__init__(category)
        self.category = category

    def __str__(self) -> str:
        return (
            f"Unknown category '{self.category}'. "
            f"Available categories: {', '.join(CATEGORIES)}"
        )


GITMOJIS: Tuple[Gitmoji, ...] = (
    Gitmoji("🎨", ":art:", "art", "Improve structure / format of the code."),
    Gitmoji("⚡️", ":zap:", "zap", "Improve performance."),
    Gitmoji("🔥", ":fire:", "fire", "Remove code or files."),
    Gitmoji("🐛", ":bug:", "bug", "Fix a bug."),
    Gitmoji("🚑️", ":ambulance:", "ambulance", "Critical hotfix."),
    Gitmoji("✨", ":sparkles:", "sparkles", "Introduce new features."),
    Gitmoji("📝", ":memo:", "memo", "Add or update documentation."),
    Gitmoji("🚀", ":rocket:", "rocket", "Deploy stuff."),
    Gitmoji("💄", ":lipstick:", "lipstick", "Add or update the UI and style files."),
    Gitmoji("🎉", ":tada:", "tada", "Begin a project."),
    Gitmoji("✅", ":white_check_mark:", "white-check-mark", "Add, update, or pass tests."),
    Gitmoji("🔒️", ":lock:", "lock", "Fix security or privacy issues."),
    Gitmoji("🔐", ":closed_lock_with_key:", "closed-lock-with-key", "Add or update secrets."),
    Gitmoji("🔖", ":bookmark:", "bookmark", "Release / Version tags."),
    Gitmoji("🚨", ":rotating_light:", "rotating-light", "Fix compiler / linter warnings."),
    Gitmoji("🚧", ":construction:", "construction", "Work in progress."),
    Gitmoji("💚", ":green_heart:", "green-heart", "Fix CI Build."),
    Gitmoji("⬇️", ":arrow_down:", "arrow-down", "Downgrade dependencies."),
    Gitmoji("⬆️", ":arrow_up:", "arrow-up", "Upgrade dependencies."),
    Gitmoji("📌", ":pushpin:", "pushpin", "Pin dependencies to specific versions."),
    Gitmoji("👷", ":construction_worker:", "construction-worker", "Add or update CI build system."),
    Gitmoji("📈", ":chart_with_upwards_trend:", "chart-with-upwards-trend", "Add or update analytics or track code."),
    Gitmoji("♻️", ":recycle:", "recycle", "Refactor code."),
    Gitmoji("➕", ":heavy_plus_sign:", "heavy-plus-sign", "Add a dependency."),
    Gitmoji("➖", ":heavy_minus_sign:", "heavy-minus-sign", "Remove a dependency."),
    Gitmoji("🔧", ":wrench:", "wrench", "Add or update configuration files."),
    Gitmoji("🔨", ":hammer:", "hammer", "Add or update development scripts."),
    Gitmoji("🌐", ":globe_with_meridians:", "globe-with-meridians", "Internationalization and localization."),
    Gitmoji("✏️", ":pencil2:", "pencil2", "Fix typos."),
    Gitmoji("💩", ":poop:", "poop", "Write bad code that needs to be improved."),
    Gitmoji("⏪️", ":rewind:", "rewind", "Revert changes."),
    Gitmoji("🔀", ":twisted_rightwards_arrows:", "twisted-rightwards-arrows", "Merge branches."),
    Gitmoji("📦️", ":package:", "package", "Add or update compiled files or packages."),
    Gitmoji("👽️", ":alien:", "alien", "Update code due to external API changes."),
    Gitmoji("🚚", ":truck:", "truck", "Move or rename resources (e.g.: files, paths, routes)."),
    Gitmoji("📄", ":page_facing_up:", "page-facing-up", "Add or update license."),
    Gitmoji("💥", ":boom:", "boom", "Introduce breaking changes."),
    Gitmoji("🍱", ":bento:", "bento", "Add or update assets."),
    Gitmoji("♿️", ":wheelchair:", "wheelchair", "Improve accessibility."),
    Gitmoji("💡", ":bulb:", "bulb", "Add or update comments in source code."),
    Gitmoji("🍻", ":beers:", "beers", "Write code drunkenly."),
    Gitmoji("💬", ":speech_balloon:", "speech-balloon", "Add or update text and literals."),
    Gitmoji("🗃️", ":card_file_box:", "card-file-box", "Perform database related changes."),
    Gitmoji("🔊", ":loud_sound:", "loud-sound", "Add or update logs."),
    Gitmoji("🔇", ":mute:", "mute", "Remove logs."),
    Gitmoji("👥", ":busts_in_silhouette:", "busts-in-silhouette", "Add or update contributor(s)."),
    Gitmoji("🚸", ":children_crossing:", "children-crossing", "Improve user experience / usability."),
    Gitmoji("🏗️", ":building_construction:", "building-construction", "Make architectural changes."),
    Gitmoji("📱", ":iphone:", "iphone", "Work on responsive design."),
    Gitmoji("🤡", ":clown_face:", "clown-face", "Mock things."),
    Gitmoji("🥚", ":egg:", "egg", "Add or update an easter egg."),
    Gitmoji("🙈", ":see_no_evil:", "see-no-evil", "Add or update a .gitignore file."),
    Gitmoji("📸", ":camera_flash:", "camera-flash", "Add or update snapshots."),
    Gitmoji("⚗️", ":alembic:", "alembic", "Perform experiments."),
    Gitmoji("🔍️", ":mag:", "mag", "Improve SEO."),
    Gitmoji("🏷️", ":label:", "label", "Add or update types."),
    Gitmoji("🌱", ":seedling:", "seedling", "Add or update seed files."),
    Gitmoji("🚩", ":triangular_flag_on_post:", "triangular-flag-on-post", "Add, update, or remove feature flags."),
    Gitmoji("🥅", ":goal_net:", "goal-net", "Catch errors."),
    Gitmoji("💫", ":dizzy:", "dizzy", "Add or update animations and transitions."),
    Gitmoji("🗑️", ":wastebasket:", "wastebasket", "Deprecate code that needs to be cleaned up."),
    Gitmoji("🛂", ":passport_control:", "passport-control", "Work on code related to authorization, roles and permissions."),
    Gitmoji("🩹", ":adhesive_bandage:", "adhesive-bandage", "Simple fix for a non-critical issue."),
    Gitmoji("🧐", ":monocle_face:", "monocle-face", "Data exploration/inspection."),
    Gitmoji("⚰️", ":coffin:", "coffin", "Remove dead code."),
    Gitmoji("🧪", ":test_tube:", "test-tube", "Add a failing test."),
    Gitmoji("👔", ":necktie:", "necktie", "Add or update business logic."),
    Gitmoji("🩺", ":stethoscope:", "stethoscope", "Add or update healthcheck."),
    Gitmoji("🧱", ":bricks:", "bricks", "Infrastructure related changes."),
    Gitmoji("🧑‍💻", ":technologist:", "technologist", "Improve developer experience."),
    Gitmoji("💸", ":money_with_wings:", "money-with-wings", "Add sponsorships or money related infrastructure."),
    Gitmoji("🧵", ":thread:", "thread", "Add or update code related to multithreading or concurrency."),
    Gitmoji("🦺", ":safety_vest:", "safety-vest", "Add or update code related to validation."),
    Gitmoji("✈️", ":airplane:", "airplane", "Improve offline support."),
)

CATEGORIES: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "breaking": (":boom:",),
        "bug": (":bug:", ":ambulance:", ":adhesive_bandage:", ":green_heart:"),
        "build": (":construction_worker:", ":green_heart:", ":arrow_up:", ":arrow_down:"),
        "chore": (":wrench:", ":hammer:", ":package:"),
        "ci": (":construction_worker:", ":green_heart:"),
        "config": (":wrench:", ":heavy_plus_sign:", ":heavy_minus_sign:"),
        "deps": (":arrow_up:", ":arrow_down:", ":heavy_plus_sign:", ":heavy_minus_sign:", ":pushpin:"),
        "docs": (":memo:", ":bulb:", ":card_file_box:", ":children_crossing:"),
        "feature": (":sparkles:", ":zap:", ":construction:", ":heavy_plus_sign:"),
        "hotfix": (":ambulance:", ":fire:"),
        "perf": (":zap:", ":chart_with_upwards_trend:"),
        "refactor": (":recycle:", ":truck:", ":fire:", ":wastebasket:"),
        "release": (":bookmark:", ":rocket:", ":tada:"),
        "revert": (":rewind:",),
        "security": (":lock:", ":passport_control:"),
        "style": (":art:", ":lipstick:", ":rotating_light:", ":recycle:"),
        "test": (":white_check_mark:", ":construction_worker:", ":green_heart:"),
        "wip": (":construction:",),
    }
)


def search_gitmojis(term: str, gitmojis: Iterable[Gitmoji] = GITMOJIS) -> Tuple[Gitmoji, ...]:
    """Return the gitmojis whose description, code or name contains ``term``."""
    needle = term.lower()
    return tuple(
        g
        for g in gitmojis
        if needle in g.description.lower() or needle in g.code.lower() or needle in g.name.lower()
    )


def filter_by_category(category: str, gitmojis: Iterable[Gitmoji] = GITMOJIS) -> Tuple[Gitmoji, ...]:
    """Return the gitmojis belonging to ``category``.

    Raises
    ------
    UnknownCategoryError
        If ``category`` is not a key of :data:`CATEGORIES`.
    """
    codes = CATEGORIES.get(category.lower())
    if codes is None:
        raise UnknownCategoryError(category)
    return tuple(g for g in gitmojis if g.code in codes)


def find_gitmoji(code: str) -> Optional[Gitmoji]:
    """Look up a gitmoji by its ``:code:``."""
    for gitmoji in GITMOJIS:
        if gitmoji.code == code:
            return gitmoji
    return None


def reference_table(gitmojis: Iterable[Gitmoji] = GITMOJIS) -> str:
    """Render ``emoji code: description`` lines for use in a prompt."""
    return "\n".join(f"{g.emoji} {g.code}: {g.description}" for g in gitmojis)
