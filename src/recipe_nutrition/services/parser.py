"""Recipe text parser.

Input convention, one item per line::

    Chicken Tacos
    2 cups shredded chicken
    1 cup salsa verde (1/2 cup tomatillos, 1/4 cup onions, 2 tbsp cilantro)
    8 corn tortillas

The first non-blank line is the title. Every following non-blank line is
``<quantity> <unit> <name>``, optionally followed by a parenthetical,
comma-separated ingredient list describing a sub-recipe. Groups that read as
notes, such as ``(diced)`` or ``(about 1 cup)``, are dropped from the name.
Parentheses are read one level deep only.

Hard problems (empty text, no ingredients, unbalanced or empty parentheses,
division by zero) are recorded in ``ParsedRecipe.errors`` and stop parsing;
whatever was parsed before the problem is kept for preview. Advisory
problems go to ``ParsedRecipe.warnings``.
"""

import html
import re
from dataclasses import dataclass, field

from recipe_nutrition.domain.errors import ParseError
from recipe_nutrition.domain.recipes import ParsedIngredient, ParsedRecipe, SubRecipe
from recipe_nutrition.services.quantities import MAX_QUANTITY, lex_leading_quantity
from recipe_nutrition.services.specification import specification_for
from recipe_nutrition.services.units import match_leading_unit

MAX_NAME_LENGTH = 255
MAX_TEXT_BYTES = 5 * 1024 * 1024
MAX_EXPLICIT_SERVINGS = 1000
DEFAULT_UNIT = "item"

_HTML_TAG = re.compile(r"<[^>]*>")
_INVISIBLE = re.compile(r"[\u200b-\u200d\u2060\ufeff]")
_HORIZONTAL_SPACE = re.compile(r"[ \t\u00a0\u1680\u2000-\u200a\u202f\u205f\u3000]+")
_PRIVATE_USE_BULLET = re.compile(r"^[\ue000-\uf8ff]+\s*")
_SYMBOL_BULLET = re.compile(
    r"^[\u2022\u2023\u25e6\u2043\u2219\u25cb\u25cf\u25aa\u25ab\u25a0\u25a1"
    r"\u2192\u203a\u00bb]\s*"
)
_ASCII_BULLET = re.compile(r"^[-*+]\s+")
_NUMBERED_ITEM = re.compile(r"^\d+[.)]\s+")

_INGREDIENTS_HEADER = re.compile(r"^ingredients?\s*:?$", re.IGNORECASE)
_SECTION_END = re.compile(
    r"^(directions?|instructions?|method|steps?|preparation|notes?)\s*:?$",
    re.IGNORECASE,
)
_SERVINGS_LABEL = re.compile(
    r"^(?:makes?|serves?|servings?|yields?)\s*:?\s*(?P<count>\d+)?"
    r"(?:\s+(?:servings?|portions?|people))?$",
    re.IGNORECASE,
)
_SERVINGS_COUNT = re.compile(
    r"^(?P<count>\d+)\s+(?:servings?|portions?|people)$", re.IGNORECASE
)
_DESCRIPTIVE_NOTE = re.compile(
    r"^(about|approximately|approx|roughly|around|optional|to taste|as needed"
    r"|or more|or less|plus more|divided)\b",
    re.IGNORECASE,
)
_GROUP_MEASURE = re.compile(
    r"\b(cups?|tbsps?|tsps?|tablespoons?|teaspoons?|oz|ounces?|pounds?|lbs?"
    r"|grams?|g|kg|ml|liters?|l)\b",
    re.IGNORECASE,
)
_GROUP_FOOD = re.compile(
    r"\b(tomato(es)?|onions?|garlics?|peppers?|oils?|water|salt|sugars?|flours?"
    r"|cheeses?|meats?|chickens?|beef|pork|fish|rice|beans?|carrots?|celer[yi]"
    r"|basil|cilantro|parsley|eggs?|milk|creams?|butters?|sauces?|broths?|stocks?)\b",
    re.IGNORECASE,
)
_GROUP_DESCRIPTOR = re.compile(
    r"\b(boneless|skinless|fresh|raw|cooked|dried|frozen|canned|organic|chopped"
    r"|diced|minced|sliced|shredded|grated|whole|ground|breast|thigh|leg|wing"
    r"|fillet|loin|rib|back|neck|shoulder)\b",
    re.IGNORECASE,
)


@dataclass
class _ParseState:
    ingredients: list[ParsedIngredient] = field(default_factory=list)
    sub_recipes: list[SubRecipe] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class _LineGroups:
    head: str
    groups: tuple[str, ...]
    tail: str
    nested: bool


def parse_recipe(text: str) -> ParsedRecipe:
    """Parse recipe text into a title, ingredients and sub-recipes."""
    size = len(text.encode("utf-8"))
    if size > MAX_TEXT_BYTES:
        return ParsedRecipe(
            title="",
            errors=(
                f"recipe text is too large ({size / 1024 / 1024:.2f} MB); "
                f"maximum is {MAX_TEXT_BYTES // 1024 // 1024} MB",
            ),
        )

    lines = [
        (number, _strip_list_marker(line.strip()))
        for number, line in enumerate(sanitize_recipe_text(text).splitlines(), start=1)
    ]
    lines = [(number, line) for number, line in lines if line]
    if not lines:
        return ParsedRecipe(title="", errors=("recipe text is empty",))

    state = _ParseState()
    title_number, title = lines[0]
    title = _truncate(title, "title", title_number, state)
    explicit_servings: int | None = None
    ingredient_lines = 0

    for number, line in lines[1:]:
        if _INGREDIENTS_HEADER.match(line):
            continue
        if _SECTION_END.match(line):
            break
        servings_match = _SERVINGS_LABEL.match(line) or _SERVINGS_COUNT.match(line)
        if servings_match:
            count = servings_match.group("count")
            if count and explicit_servings is None:
                value = int(count)
                if 0 < value <= MAX_EXPLICIT_SERVINGS:
                    explicit_servings = value
            continue

        ingredient_lines += 1
        try:
            _parse_line(line, number, state)
        except ParseError as exc:
            state.errors.append(exc.message)
            break

    if ingredient_lines == 0:
        state.errors.append("recipe must have at least one ingredient")

    return ParsedRecipe(
        title=title,
        ingredients=tuple(state.ingredients),
        sub_recipes=tuple(state.sub_recipes),
        warnings=tuple(state.warnings),
        errors=tuple(state.errors),
        explicit_servings=explicit_servings,
    )


def parse_ingredient_text(text: str) -> tuple[ParsedIngredient, tuple[str, ...]]:
    """Tokenize a single ingredient string without parenthesis handling.

    Returns the ingredient and any warnings. Raises ParseError for a zero
    denominator or a missing name.
    """
    state = _ParseState()
    ingredient = _tokenize(text.strip(), 1, state, context=None)
    return ingredient, tuple(state.warnings)


def sanitize_recipe_text(text: str) -> str:
    """Strip markup and invisible characters pasted along with recipe text."""
    cleaned = _HTML_TAG.sub("", text)
    cleaned = html.unescape(cleaned)
    cleaned = _INVISIBLE.sub("", cleaned)
    cleaned = cleaned.replace("\r\n", "\n").replace("\r", "\n")
    cleaned = _HORIZONTAL_SPACE.sub(" ", cleaned)
    return cleaned.strip()


def _strip_list_marker(line: str) -> str:
    line = _PRIVATE_USE_BULLET.sub("", line)
    line = _SYMBOL_BULLET.sub("", line)
    line = _ASCII_BULLET.sub("", line)
    line = _NUMBERED_ITEM.sub("", line)
    return line.strip()


def _is_descriptive_group(group: str) -> bool:
    """Tell a note like "(diced)" or "(boneless, skinless)" from a sub-recipe list.

    A single item is a note when it is a measurement or at most two words.
    Several items form a sub-recipe only when at least two look like
    ingredients (a number, a unit or a food word) and they outnumber the
    descriptor-like ones.
    """
    text = group.strip()
    if _DESCRIPTIVE_NOTE.match(text):
        return True
    items = [item.strip() for item in text.split(",") if item.strip()]
    if len(items) == 1:
        item = items[0]
        return (
            _GROUP_MEASURE.search(item) is not None
            or len(re.findall(r"\d+", item)) > 1
            or len(item.split()) <= 2
        )

    ingredient_like = 0
    descriptor_like = 0
    for item in items:
        food = _GROUP_FOOD.search(item) is not None
        descriptor = _GROUP_DESCRIPTOR.search(item) is not None
        if re.search(r"\d", item) or _GROUP_MEASURE.search(item):
            ingredient_like += 1
        elif food and not descriptor:
            ingredient_like += 1
        elif descriptor or (len(item.split()) == 1 and len(item) < 12 and not food):
            descriptor_like += 1
    if descriptor_like and descriptor_like >= ingredient_like:
        return True
    return ingredient_like < 2


def _parse_line(line: str, number: int, state: _ParseState) -> None:
    parts = _split_groups(line, number)
    if not parts.groups:
        state.ingredients.append(_tokenize(line, number, state, context=None))
        return

    for group in parts.groups:
        if not group.strip():
            raise ParseError(
                f'Line {number}: empty parentheses in "{line}"; sub-recipes must '
                "list their ingredients inside the parentheses",
                number,
            )

    recipe_groups = [g for g in parts.groups if not _is_descriptive_group(g)]
    if not recipe_groups:
        # Only notes such as "(about 1 cup)" or "(boneless, skinless)": a plain ingredient.
        text = " ".join(f"{parts.head} {parts.tail}".split())
        state.ingredients.append(
            _tokenize(text, number, state, context=None, raw_text=line)
        )
        return

    parent = _tokenize(parts.head.strip(), number, state, context=None, raw_text=line)
    name = parent.ingredient_name
    if len(recipe_groups) > 1:
        state.warnings.append(
            f'Line {number}: "{name}" has more than one parenthetical group; '
            "only the first is used as its sub-recipe"
        )
    if parts.nested:
        state.warnings.append(
            f'Line {number}: "{name}" contains nested parentheses; only the '
            "outermost level is read, inner parentheses stay as plain text"
        )
    if parts.tail.strip():
        state.warnings.append(
            f'Line {number}: text after the parentheses of "{name}" is ignored: '
            f'"{parts.tail.strip()}"'
        )

    items = [item.strip() for item in recipe_groups[0].split(",") if item.strip()]
    if not items:
        raise ParseError(
            f'Line {number}: empty parentheses in "{line}"; sub-recipes must '
            "list their ingredients inside the parentheses",
            number,
        )
    context = f'sub-recipe "{name}"'
    ingredients = tuple(_tokenize(item, number, state, context=context) for item in items)

    if any(existing.name.casefold() == name.casefold() for existing in state.sub_recipes):
        state.warnings.append(
            f'Line {number}: duplicate sub-recipe name "{name}"; each occurrence is '
            "kept separately"
        )
    state.sub_recipes.append(
        SubRecipe(
            name=name,
            ingredients=ingredients,
            quantity=parent.quantity,
            unit=parent.unit,
            raw_text=line,
        )
    )


def _split_groups(line: str, number: int) -> _LineGroups:
    head: list[str] = []
    tail: list[str] = []
    groups: list[str] = []
    current: list[str] = []
    depth = 0
    nested = False

    for char in line:
        if char == "(":
            if depth == 0:
                current = []
            else:
                nested = True
                current.append(char)
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                break
            if depth == 0:
                groups.append("".join(current))
            else:
                current.append(char)
        elif depth > 0:
            current.append(char)
        elif groups:
            tail.append(char)
        else:
            head.append(char)

    if depth != 0:
        raise ParseError(
            f'Line {number}: unbalanced parentheses in "{line}" '
            f"({line.count('(')} opening, {line.count(')')} closing); each opening "
            "parenthesis needs a matching closing one",
            number,
        )
    return _LineGroups("".join(head), tuple(groups), "".join(tail), nested)


def _tokenize(
    text: str,
    number: int,
    state: _ParseState,
    context: str | None,
    raw_text: str | None = None,
) -> ParsedIngredient:
    where = f"Line {number}" + (f" ({context})" if context else "")
    try:
        lexed = lex_leading_quantity(text)
    except ParseError as exc:
        raise ParseError(f"{where}: {exc.message}", number) from exc

    if lexed is None:
        if context is not None:
            raise ParseError(
                f'{where}: ingredient "{text}" has no quantity; every sub-recipe '
                "ingredient needs one, for example \"1/2 cup tomatoes\"",
                number,
            )
        quantity = 1.0
        rest = text
        state.warnings.append(f'{where}: no quantity in "{text}"; assuming 1')
    else:
        quantity = lexed.value
        rest = lexed.remainder
        if lexed.capped:
            state.warnings.append(
                f"{where}: quantity {lexed.literal} exceeds {MAX_QUANTITY:,.0f}; "
                f"capped at {MAX_QUANTITY:,.0f}"
            )

    unit, name = match_leading_unit(rest)
    if name.lower().startswith("of "):
        name = name[3:].strip()
    if not name:
        raise ParseError(f'{where}: missing ingredient name in "{text}"', number)
    if unit is None:
        unit = DEFAULT_UNIT
        state.warnings.append(f'{where}: no unit for "{name}"; using "{DEFAULT_UNIT}"')

    name = _truncate(name, "ingredient name", number, state)
    specification = specification_for(unit, name, raw_text or text)
    return ParsedIngredient(
        raw_text=raw_text or text,
        quantity=quantity,
        unit=unit,
        ingredient_name=name,
        needs_specification=specification is not None,
        base_ingredient=specification.base_ingredient if specification else None,
        specification_options=specification.options if specification else (),
    )


def _truncate(value: str, what: str, number: int, state: _ParseState) -> str:
    if len(value) <= MAX_NAME_LENGTH:
        return value
    state.warnings.append(
        f"Line {number}: {what} longer than {MAX_NAME_LENGTH} characters was "
        "truncated"
    )
    return value[:MAX_NAME_LENGTH].rstrip()
