"""
Skill category taxonomy

The category list is fixed and ordered: inference walks it top to bottom and
the first category with a keyword hit wins. The last entry is the catch-all.
"""

from typing import Iterable, Optional

from .utils import normalize_name

CATCH_ALL_CATEGORY = "specialized"

CATEGORIES = [
    {
        "id": "frontend-development",
        "name": "Frontend Development",
        "description": "UI frameworks, styling and browser-side tooling",
        "icon": "🎨",
        "color": "cyan",
        "keywords": [
            "frontend", "front-end", " ui ", "ui/ux", " ux ", "react", "vue", "angular",
            "svelte", "nextjs", "next.js", "tailwind", " css", "html", "web design",
            "figma", "web-frameworks", "component library",
        ],
    },
    {
        "id": "backend-development",
        "name": "Backend Development",
        "description": "APIs, servers, databases and service frameworks",
        "icon": "🗄️",
        "color": "green",
        "keywords": [
            "backend", "back-end", " api", "server", "database", "postgres", "mysql",
            "sqlite", " sql", "graphql", "nestjs", "fastapi", "django", "flask",
            "express", "microservice",
        ],
    },
    {
        "id": "devops-infrastructure",
        "name": "DevOps & Infrastructure",
        "description": "Infrastructure, deployment, CI/CD and operations",
        "icon": "🚀",
        "color": "orange",
        "keywords": [
            "devops", "infrastructure", "kubernetes", "docker", "terraform", "deploy",
            "ci/cd", "ci-cd", "github actions", " sre ", "monitoring", "cloud",
            "aws", "azure", " gcp",
        ],
    },
    {
        "id": "ai-data-science",
        "name": "AI & Data Science",
        "description": "Machine learning, LLM tooling, data analysis and analytics",
        "icon": "🤖",
        "color": "purple",
        "keywords": [
            " ai ", " ai-", "-ai ", " ml ", "llm", "machine learning", "machine-learning",
            "data science", "data-science", "analytics", "pandas", "dataset",
            "embedding", "prompt engineering", "context-engineering",
        ],
    },
    {
        "id": "testing-quality",
        "name": "Testing & Quality",
        "description": "Testing, debugging, code review and quality assurance",
        "icon": "🧪",
        "color": "yellow",
        "keywords": [
            "test", " qa ", "quality", "debug", "code review", "code-review",
            "playwright", "cypress", "jest", "pytest", "verification", "lint",
        ],
    },
    {
        "id": "tools-productivity",
        "name": "Tools & Productivity",
        "description": "Everyday utilities, workflows and developer productivity",
        "icon": "🛠️",
        "color": "blue",
        "keywords": [
            "tool", "productivity", "workflow", " cli", "mcp", "automation",
            "skill-creator", "pdf", "docx", "xlsx", "pptx", "spreadsheet",
            "transcript", "extractor", "utility",
        ],
    },
    {
        "id": "business-marketing",
        "name": "Business & Marketing",
        "description": "Product, marketing, sales and commerce",
        "icon": "📈",
        "color": "pink",
        "keywords": [
            "business", "marketing", "product manager", "product-manager", "e-commerce",
            "ecommerce", "shopify", "salesforce", "seo", "growth", "brand",
            "content creator", "startup",
        ],
    },
    {
        "id": CATCH_ALL_CATEGORY,
        "name": "Specialized",
        "description": "Security, documentation, scientific and other domain skills",
        "icon": "📦",
        "color": "slate",
        "keywords": [
            "security", "blockchain", "game", "mobile", "embedded", "scientific",
            "compliance", "documentation",
        ],
    },
]

CATEGORY_IDS = [c["id"] for c in CATEGORIES]

_BY_ID = {c["id"]: c for c in CATEGORIES}
_BY_NAME = {normalize_name(c["name"]): c["id"] for c in CATEGORIES}


def get_category_by_id(category_id: str) -> Optional[dict]:
    return _BY_ID.get(category_id)


def is_category(category_id: str) -> bool:
    return category_id in _BY_ID


def normalize_category(value) -> Optional[str]:
    """Map an explicit category (id or display name) onto the taxonomy, or None."""
    if value is None or isinstance(value, (dict, list)):
        return None
    slug = normalize_name(str(value))
    if slug in _BY_ID:
        return slug
    return _BY_NAME.get(slug)


def infer_category(name: str, description: str, topics: Iterable[str] = ()) -> str:
    """Pick a category by keyword substring match, first hit in list order wins."""
    text = f" {name or ''} {description or ''} {' '.join(topics or [])} ".lower()

    for category in CATEGORIES:
        if category["id"] == CATCH_ALL_CATEGORY:
            continue
        for keyword in category["keywords"]:
            if keyword.lower() in text:
                return category["id"]

    return CATCH_ALL_CATEGORY


def resolve_category(explicit, name: str, description: str, topics: Iterable[str] = ()) -> str:
    """Prefer an explicit category that maps onto the taxonomy, else infer."""
    category = normalize_category(explicit)
    if category:
        return category

    topics = list(topics or [])
    hint = explicit if isinstance(explicit, str) else None
    if hint:
        topics.append(hint)
    return infer_category(name, description, topics)


def recategorize(skills: dict) -> dict:
    """
    Reassign every stored skill to the canonical taxonomy.

    Records whose category is already a member keep it. Returns a count per category.
    """
    counts = {}
    for skill in skills.values():
        current = skill.get("category")
        if not is_category(current):
            metadata = skill.get("metadata") or {}
            skill["category"] = resolve_category(
                current,
                skill.get("name", ""),
                skill.get("description", ""),
                list(metadata.get("topics") or []) + list(skill.get("tags") or []),
            )
        counts[skill["category"]] = counts.get(skill["category"], 0) + 1
    return counts
