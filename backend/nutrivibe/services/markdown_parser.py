"""
Parser for model output.

The model is asked for markdown in a known layout but is free to drift from
it, so parsing is best effort: JSON is tried first, then a line scan that
picks out day headers, meal headers, ingredient and instruction bullets,
daily totals and the trailing sections (shopping list, prep tips, cultural
notes, substitutions, nutritional summary). Lines that match nothing are
dropped.

None of the parse functions raise. When nothing useful is found they return
Unparsed with the original text, and callers store that raw text instead.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


@dataclass
class Parsed:
    """Structured record recovered from model output."""
    record: dict
    source: str  # json, markdown


@dataclass
class Unparsed:
    """Model output with no recognizable structure."""
    raw_text: str


ParseResult = Union[Parsed, Unparsed]


FENCE_PATTERN = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?```$", re.DOTALL | re.IGNORECASE)

DAY_PATTERN = re.compile(r"^(?:#{1,6}\s*)?[^\w\s]*\s*(?:\*\*)?\s*Day\s+(\d+)\b", re.IGNORECASE)

MEAL_TYPES = r"(Breakfast|Lunch|Dinner|Snacks?)"
MEAL_PATTERNS = [
    # **Breakfast**: Akara and Pap (400 calories)
    (re.compile(r"\*\*" + MEAL_TYPES + r"\*\*:\s*(.*?)\s*\((\d+)\s*(?:k?cal|calories?)\)", re.IGNORECASE), True),
    # ### **Breakfast** (400 calories)
    (re.compile(r"\*\*" + MEAL_TYPES + r"\*\*\s*\((\d+)\s*(?:k?cal|calories?)\)", re.IGNORECASE), False),
    # * Breakfast: Akara and Pap (400 calories)
    (re.compile(r"^[*-]\s*" + MEAL_TYPES + r":\s*(.*?)\s*\((\d+)\s*(?:k?cal|calories?)\)", re.IGNORECASE), True),
    # ### Breakfast (400 calories)
    (re.compile(r"^#{1,6}\s*" + MEAL_TYPES + r"\s*\((\d+)\s*(?:k?cal|calories?)\)", re.IGNORECASE), False),
]

DAY_TOTAL_PATTERN = re.compile(
    r"(?:Total Calories|Daily Total)\**\s*:?\s*\**\s*(\d[\d,]*)", re.IGNORECASE
)
BULLET_PATTERN = re.compile(r"^[-+*•]\s+(.+)$")
NUMBERED_PATTERN = re.compile(r"^\d+[.)]\s+(.+)$")
HEADING_PATTERN = re.compile(r"^(?:#{1,6}\s+.+|\*\*[^*]+\*\*:?)$")
MEAL_PART_PATTERN = re.compile(
    r"^\**\s*(Ingredients|Instructions|Method|Steps|Directions)\s*:?\s*\**\s*:?$", re.IGNORECASE
)
NOTES_PATTERN = re.compile(r"^\*\*Nutritional Notes:?\*\*:?\s*(.+)$", re.IGNORECASE)
BOLD_LINE_PATTERN = re.compile(r"^\*\*([^*]+)\*\*$")
CALORIES_PATTERN = re.compile(r"(?:calories|daily target)\W*(\d[\d,]*)", re.IGNORECASE)
QUANTITY_SPLIT = re.compile(r"\s+[–-]\s+")
TRAILING_QUANTITY = re.compile(r"^(.+?)\s*\(([^()]+)\)$")

# Checked in order; first keyword found in a heading wins
SECTION_KEYWORDS = [
    ("shopping", ("shopping list", "grocery")),
    ("tips", ("meal prep tip", "prep tips")),
    ("nutrition", ("nutritional breakdown", "nutritional summary", "nutritional overview")),
    ("cultural", ("cultural notes", "cultural note")),
    ("substitutions", ("substitution",)),
]

SECTION_FIELDS = {
    "tips": "meal_prep_tips",
    "cultural": "cultural_notes",
    "substitutions": "substitutions",
    "nutrition": "nutritional_summary",
}


def _strip_fence(text: str) -> str:
    text = text.strip()
    match = FENCE_PATTERN.match(text)
    return match.group(1).strip() if match else text


def _to_int(value: str) -> int:
    return int(value.replace(",", ""))


def _clean(text: str) -> str:
    """Drop markdown emphasis and leading decoration from a fragment."""
    text = text.replace("**", "").strip()
    text = re.sub(r"^[^\w(₦]+", "", text)
    return text.strip(" :").strip()


def _is_heading(line: str) -> bool:
    return bool(HEADING_PATTERN.match(line))


def _section_for(line: str) -> Optional[str]:
    if not _is_heading(line):
        return None
    lowered = line.lower()
    for section, keywords in SECTION_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return section
    return None


def _match_meal(line: str) -> Optional[dict]:
    for pattern, has_name in MEAL_PATTERNS:
        match = pattern.search(line)
        if not match:
            continue
        meal_type = match.group(1).lower().rstrip("s")
        if has_name:
            name, calories = match.group(2).strip(), match.group(3)
        else:
            name, calories = "", match.group(2)
        return {
            "meal_type": meal_type,
            "name": _clean(name) or match.group(1).title(),
            "calories": int(calories),
            "ingredients": [],
            "instructions": [],
        }
    return None


def split_item(text: str) -> dict:
    """Split "Rice - 2 cups" or "Rice (2 cups)" into name and quantity."""
    text = _clean(text)
    parts = QUANTITY_SPLIT.split(text, maxsplit=1)
    if len(parts) == 2:
        return {"name": parts[0].strip(), "quantity": parts[1].strip()}
    match = TRAILING_QUANTITY.match(text)
    if match:
        return {"name": match.group(1).strip(), "quantity": match.group(2).strip()}
    return {"name": text, "quantity": None}


def _add_shopping_item(categories: list[dict], category: str, text: str) -> None:
    item = split_item(text)
    if not item["name"]:
        return
    for entry in categories:
        if entry["category"] == category:
            entry["items"].append(item)
            return
    categories.append({"category": category, "items": [item]})


def parse_markdown_meal_plan(text: str) -> dict:
    """Line scan of a markdown meal plan. May return a record with no days."""
    result: dict[str, Any] = {
        "summary": "",
        "days": [],
        "shopping_list": {"categories": []},
        "meal_prep_tips": [],
        "cultural_notes": [],
        "substitutions": [],
        "nutritional_summary": [],
    }
    days_by_number: dict[int, dict] = {}

    current_day: Optional[dict] = None
    current_meal: Optional[dict] = None
    meal_part = "ingredients"
    pending_name = False
    section = ""
    shopping_category = "General"

    for index, raw_line in enumerate(text.splitlines()):
        line = raw_line.strip()
        if not line or line.startswith("---"):
            continue

        day_match = DAY_PATTERN.match(line)
        if day_match and BULLET_PATTERN.match(line):
            day_match = None

        if index < 10 and "!" in line and not result["summary"] and not day_match:
            result["summary"] = _clean(line)
            continue

        if day_match:
            number = int(day_match.group(1))
            current_day = days_by_number.get(number)
            if current_day is None:
                current_day = {"day": f"Day {number}", "day_number": number, "total_calories": 0, "meals": []}
                days_by_number[number] = current_day
                result["days"].append(current_day)
            current_meal = None
            section = ""
            continue

        marker = _section_for(line)
        if marker:
            section = marker
            current_day = None
            current_meal = None
            shopping_category = "General"
            continue

        if section == "" and current_day is not None:
            meal = _match_meal(line)
            if meal:
                current_meal = meal
                meal_part = "ingredients"
                pending_name = meal["name"].lower().rstrip("s") == meal["meal_type"]
                current_day["meals"].append(meal)
                current_day["total_calories"] += meal["calories"]
                continue

            total = DAY_TOTAL_PATTERN.search(line)
            if total:
                current_day["total_calories"] = _to_int(total.group(1))
                continue

            if current_meal is None:
                continue

            part = MEAL_PART_PATTERN.match(line)
            if part:
                meal_part = "ingredients" if part.group(1).lower() == "ingredients" else "instructions"
                continue

            notes = NOTES_PATTERN.match(line)
            if notes:
                current_meal["nutritional_notes"] = notes.group(1).strip()
                continue

            if pending_name:
                dish = BOLD_LINE_PATTERN.match(line)
                pending_name = False
                if dish:
                    current_meal["name"] = _clean(dish.group(1))
                    continue

            numbered = NUMBERED_PATTERN.match(line)
            if numbered:
                current_meal["instructions"].append(_clean(numbered.group(1)))
                continue

            bullet = BULLET_PATTERN.match(line)
            if bullet:
                current_meal[meal_part].append(_clean(bullet.group(1)))
            continue

        if section == "shopping":
            if _is_heading(line):
                shopping_category = _clean(line) or "General"
                continue
            entry = BULLET_PATTERN.match(line) or NUMBERED_PATTERN.match(line)
            if entry:
                _add_shopping_item(result["shopping_list"]["categories"], shopping_category, entry.group(1))
            continue

        if section in SECTION_FIELDS:
            entry = BULLET_PATTERN.match(line) or NUMBERED_PATTERN.match(line)
            if not entry:
                continue
            item = _clean(entry.group(1))
            result[SECTION_FIELDS[section]].append(item)
            if section == "nutrition" and "nutritional_goals" not in result:
                calories = CALORIES_PATTERN.search(item)
                if calories:
                    result["nutritional_goals"] = {"daily_calories": _to_int(calories.group(1))}

    return result


def load_json_object(text: str) -> Optional[dict]:
    try:
        data = json.loads(_strip_fence(text))
    except (json.JSONDecodeError, ValueError):
        return None
    if isinstance(data, dict) and data:
        return data
    return None


def parse_meal_plan(raw_text: str) -> ParseResult:
    """Parse a generated meal plan.

    A non-empty JSON object is returned unchanged. Otherwise the markdown
    scan runs, and the result counts as parsed when it found at least one day.
    """
    if not raw_text or not raw_text.strip():
        return Unparsed(raw_text=raw_text or "")

    data = load_json_object(raw_text)
    if data is not None:
        return Parsed(record=data, source="json")

    try:
        record = parse_markdown_meal_plan(raw_text)
    except Exception as e:
        logger.error(f"Error parsing markdown meal plan: {e}")
        return Unparsed(raw_text=raw_text)

    if not record["days"]:
        logger.info("No day sections found in meal plan; keeping raw text")
        return Unparsed(raw_text=raw_text)

    logger.debug(f"Parsed meal plan with {len(record['days'])} days")
    return Parsed(record=record, source="markdown")


def _group_items(items: list[dict]) -> list[dict]:
    categories: list[dict] = []
    for item in items:
        if not isinstance(item, dict) or not item.get("name"):
            continue
        category = item.get("category") or "General"
        entry = {"name": str(item["name"]), "quantity": item.get("quantity")}
        for existing in categories:
            if existing["category"] == category:
                existing["items"].append(entry)
                break
        else:
            categories.append({"category": category, "items": [entry]})
    return categories


def shopping_categories(shopping_list: Any) -> list[dict]:
    """Normalize the shapes a shopping list shows up in.

    Accepts {"categories": [...]}, {"categories": {name: [...]}} or
    {"items": [...]} and returns [{"category", "items"}].
    """
    if not isinstance(shopping_list, dict):
        return []

    categories = shopping_list.get("categories")
    if isinstance(categories, dict):
        return [
            {"category": name, "items": [
                {"name": i.get("name"), "quantity": i.get("quantity") or i.get("totalAmount")}
                for i in items if isinstance(i, dict) and i.get("name")
            ]}
            for name, items in categories.items() if isinstance(items, list)
        ]
    if isinstance(categories, list):
        return [
            {"category": c.get("category") or "General", "items": [
                i for i in c.get("items", []) if isinstance(i, dict) and i.get("name")
            ]}
            for c in categories if isinstance(c, dict)
        ]
    if isinstance(shopping_list.get("items"), list):
        return _group_items(shopping_list["items"])
    return []


def parse_shopping_list(raw_text: str) -> ParseResult:
    """Parse a generated shopping list into {"categories": [...]}."""
    if not raw_text or not raw_text.strip():
        return Unparsed(raw_text=raw_text or "")

    data = load_json_object(raw_text)
    if data is not None:
        categories = shopping_categories(data)
        if any(c["items"] for c in categories):
            return Parsed(record={**data, "categories": categories}, source="json")

    categories: list[dict] = []
    category = "General"
    for raw_line in raw_text.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        if _is_heading(line):
            category = _clean(line) or "General"
            continue
        entry = BULLET_PATTERN.match(line) or NUMBERED_PATTERN.match(line)
        if entry:
            _add_shopping_item(categories, category, entry.group(1))

    if not categories:
        return Unparsed(raw_text=raw_text)
    return Parsed(record={"categories": categories}, source="markdown")


TITLE_PATTERNS = [
    re.compile(r"^\s*#\s+(.+)$", re.MULTILINE),
    re.compile(r"^\s*\*\*Recipe:\s*([^\n*]+)\*\*", re.MULTILINE),
    re.compile(r"^\s*Recipe:\s*(.+)$", re.MULTILINE),
]


def extract_recipe_title(content: str, default: str = "AI Generated Recipe") -> str:
    """Title from the first heading or "Recipe: ..." line."""
    for pattern in TITLE_PATTERNS:
        match = pattern.search(content or "")
        if match:
            title = match.group(1).strip().strip("*").strip()
            if title.lower().startswith("recipe:"):
                title = title[len("recipe:"):].strip()
            if title:
                return title
    return default


RECIPE_LABELS = {
    "description": "description",
    "recipe details": "details",
    "ingredients": "ingredients",
    "instructions": "instructions",
    "method": "instructions",
    "steps": "instructions",
    "directions": "instructions",
    "nutritional information": "nutrition",
    "nutritional info": "nutrition",
    "nutrition": "nutrition",
    "cultural context": "cultural_context",
    "health benefits": "health_benefits",
    "pro tips": "pro_tips",
}
LIST_SECTIONS = {"ingredients", "instructions"}
KEY_VALUE_SECTIONS = {"details", "nutrition"}
LABEL_PATTERN = re.compile(r"^(?:#{1,6}\s*)?\*\*([^*:]+?):?\*\*:?\s*(.*)$|^#{1,6}\s*([^*:]+?):?\s*$")
# "Nutritional Information (per serving)"
LABEL_QUALIFIER = re.compile(r"\s*\([^)]*\)$")


def parse_recipe(raw_text: str) -> ParseResult:
    """Split a single-recipe response into its labelled sections."""
    if not raw_text or not raw_text.strip():
        return Unparsed(raw_text=raw_text or "")

    data = load_json_object(raw_text)
    if data is not None and data.get("title"):
        return Parsed(record=data, source="json")

    record: dict[str, Any] = {
        "title": extract_recipe_title(raw_text, default=""),
        "ingredients": [],
        "instructions": [],
        "details": {},
        "nutrition": {},
    }
    key: Optional[str] = None

    for raw_line in raw_text.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        label = LABEL_PATTERN.match(line)
        if label:
            name = (label.group(1) or label.group(3) or "").strip().lower()
            name = LABEL_QUALIFIER.sub("", name)
            if name in RECIPE_LABELS:
                key = RECIPE_LABELS[name]
                inline = (label.group(2) or "").strip()
                if inline and key not in LIST_SECTIONS | KEY_VALUE_SECTIONS:
                    record[key] = inline
                continue

        if key is None:
            continue

        entry = BULLET_PATTERN.match(line) or NUMBERED_PATTERN.match(line)
        if key in LIST_SECTIONS:
            if entry:
                record[key].append(_clean(entry.group(1)))
        elif key in KEY_VALUE_SECTIONS:
            if entry and ":" in entry.group(1):
                name, value = entry.group(1).split(":", 1)
                record[key][_clean(name).lower()] = value.replace("**", "").strip()
        else:
            text = _clean(entry.group(1)) if entry else line
            record[key] = f"{record[key]} {text}".strip() if record.get(key) else text

    if not record["title"] or not (record["ingredients"] or record["instructions"]):
        return Unparsed(raw_text=raw_text)
    return Parsed(record=record, source="markdown")
