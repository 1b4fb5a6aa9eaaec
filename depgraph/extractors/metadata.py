"""
Best-effort metadata extraction from skill and subagent documents.

Reads the YAML frontmatter block (if any) plus a few conventional body sections
("## When to Use", "**Related skills:**", "## Key Principles", ...). Nothing here
validates a schema: missing fields come back as None or empty lists.

A frontmatter block that YAML cannot parse raises FrontmatterError from every
helper that needs it; callers decide whether to drop the metadata.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

import yaml


FRONTMATTER_PATTERN = re.compile(r'^---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|$)', re.DOTALL)
HEADING_PATTERN = re.compile(r'^#\s+(.+)$', re.MULTILINE)

MAX_TRIGGER_ITEMS = 5
MAX_EXAMPLES = 3
MAX_KEY_POINTS = 5


class FrontmatterError(ValueError):
    """Raised when a frontmatter block is present but is not valid YAML."""


@dataclass(frozen=True)
class ParsedFrontmatter:
    data: Dict[str, Any]
    body: str
    has_frontmatter: bool


@dataclass(frozen=True)
class TriggerInfo:
    """A condition under which a skill or agent should be used."""
    condition: str


@dataclass(frozen=True)
class ExampleInfo:
    title: str
    content: str
    type: Literal['text', 'code'] = 'text'


@dataclass(frozen=True)
class SkillMetadata:
    """Structured summary of a skill or subagent document."""
    name: Optional[str] = None
    triggers: List[TriggerInfo] = field(default_factory=list)
    related_skills: List[str] = field(default_factory=list)
    related_agents: List[str] = field(default_factory=list)
    examples: List[ExampleInfo] = field(default_factory=list)
    flow_chart: Optional[str] = None
    key_points: List[str] = field(default_factory=list)


def parse_frontmatter(content: str) -> ParsedFrontmatter:
    """
    Split a document into its YAML frontmatter and body.

    Args:
        content: Raw document text

    Returns:
        ParsedFrontmatter; ``data`` is empty when there is no block or the block
        is not a mapping

    Raises:
        FrontmatterError: If the block exists but is not valid YAML
    """
    match = FRONTMATTER_PATTERN.match(content)
    if not match:
        return ParsedFrontmatter(data={}, body=content, has_frontmatter=False)

    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        raise FrontmatterError(f"Invalid frontmatter: {e}") from e

    if not isinstance(data, dict):
        data = {}
    return ParsedFrontmatter(data=data, body=content[match.end():], has_frontmatter=True)


def _string_field(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    # Folded and literal block scalars keep their line breaks; flatten them
    text = ' '.join(str(value).split())
    return text or None


def _heading(content: str) -> Optional[str]:
    match = HEADING_PATTERN.search(content)
    return match.group(1).strip() if match else None


def extract_description(content: str) -> Optional[str]:
    """Frontmatter ``description``, else the first ``# `` heading."""
    description = _string_field(parse_frontmatter(content).data, 'description')
    return description if description else _heading(content)


def extract_title(content: str) -> Optional[str]:
    """Frontmatter ``name``, else the first ``# `` heading."""
    name = _string_field(parse_frontmatter(content).data, 'name')
    return name if name else _heading(content)


def extract_skill_name(content: str) -> Optional[str]:
    return _string_field(parse_frontmatter(content).data, 'name')


_TRIGGER_VERBS = re.compile(r'^(simplif|refin|analyz|review|creat|generat|help|assist)', re.IGNORECASE)


def extract_triggers(content: str) -> List[TriggerInfo]:
    """
    Extract the conditions under which a document should be used.

    Sources, in order: "Use this agent when ..." / "Use when ..." / "You must use
    this before ..." phrases in the description, a short verb-led description, list
    items under "## When to Use", the first sentence under "## Task", and finally
    the heading of a document without frontmatter.
    """
    triggers: List[TriggerInfo] = []
    parsed = parse_frontmatter(content)
    description = extract_description(content)
    title = extract_title(content)

    if description:
        use_agent = re.search(
            r'use this (?:agent|tool)\s+when\s+(.+?)(?:\.|Examples:|$)', description, re.IGNORECASE | re.DOTALL
        )
        if use_agent:
            triggers.append(TriggerInfo(use_agent.group(1).strip()))
        else:
            use_when = re.search(r'use when\s+(.+?)(?:\.|$)', description, re.IGNORECASE)
            if use_when:
                for condition in re.split(r',\s*(?:or\s+)?|\s+or\s+', use_when.group(1).strip(), flags=re.IGNORECASE):
                    if condition.strip():
                        triggers.append(TriggerInfo(condition.strip()))

        must_use = re.search(r'you must use this (?:before|when)\s+(.+?)(?:\.|$)', description, re.IGNORECASE)
        if must_use:
            triggers.append(TriggerInfo(must_use.group(1).strip()))

        if not triggers and len(description) < 200 and _TRIGGER_VERBS.match(description):
            triggers.append(TriggerInfo(description))

    when_to_use = re.search(r'##\s*When to Use\s*\n(.*?)(?=\n##|\Z)', content, re.IGNORECASE | re.DOTALL)
    if when_to_use:
        items = re.findall(r'^[-*]\s+(.+)$', when_to_use.group(1), re.MULTILINE)
        for item in items[:MAX_TRIGGER_ITEMS]:
            text = item.strip()
            if text and all(t.condition != text for t in triggers):
                triggers.append(TriggerInfo(text))

    if not triggers:
        task = re.search(r'##\s*(?:Your\s+)?Task\s*\n(.*?)(?=\n##|\Z)', content, re.IGNORECASE | re.DOTALL)
        if task:
            first_sentence = re.search(r'^([^.\n]+\.?)', task.group(1).strip())
            if first_sentence:
                triggers.append(TriggerInfo(first_sentence.group(1).strip()))

    if not triggers and title and not parsed.has_frontmatter:
        triggers.append(TriggerInfo(title))

    return triggers


def extract_agent_examples(content: str) -> List[ExampleInfo]:
    """User turns from ``<example>`` blocks inside the description."""
    description = extract_description(content)
    if not description:
        return []

    examples: List[ExampleInfo] = []
    for match in re.finditer(r'<example>(.*?)</example>', description, re.IGNORECASE | re.DOTALL):
        block = match.group(1)
        user = re.search(r'user:\s*["\']?([^"\'\n]+)["\']?', block, re.IGNORECASE)
        if not user:
            continue
        commentary = re.search(r'<commentary>([^<]+)</commentary>', block, re.IGNORECASE)
        text = f'"{user.group(1).strip()}"'
        if commentary:
            text += f"\n-> {commentary.group(1).strip()}"
        examples.append(ExampleInfo(title='User input example', content=text, type='text'))

    return examples[:MAX_EXAMPLES]


def extract_examples(content: str) -> List[ExampleInfo]:
    examples = extract_agent_examples(content)

    code_blocks = re.finditer(
        r'(?:\*\*)?Example(?:\s*\([^)]+\))?:?\*?\*?\s*\n```\w*\n(.*?)```', content, re.IGNORECASE | re.DOTALL
    )
    for match in code_blocks:
        code = match.group(1).strip()
        if code:
            examples.append(ExampleInfo(title='Example', content=code, type='code'))

    quick = re.search(r'\*\*Quick version:\*\*\s*\n(.*?)(?=\n\n##|\n\*\*|\Z)', content, re.IGNORECASE | re.DOTALL)
    if quick and quick.group(1).strip():
        examples.append(ExampleInfo(title='Quick guide', content=quick.group(1).strip(), type='text'))

    return examples[:MAX_EXAMPLES]


def extract_related_skills(content: str) -> List[str]:
    """``superpowers:<name>`` tokens plus entries of a "**Related skills:**" list."""
    skills = [m.lower() for m in re.findall(r'superpowers:([a-z][a-z0-9-]*)', content, re.IGNORECASE)]

    related = re.search(r'\*\*Related skills:\*\*\s*\n(.*?)(?=\n\n|\n\*\*|\Z)', content, re.IGNORECASE | re.DOTALL)
    if related:
        for name in re.findall(r'[-*]\s+\*\*([^*]+)\*\*', related.group(1)):
            skills.append(re.sub(r'superpowers:', '', name, flags=re.IGNORECASE).strip().lower())

    return list(dict.fromkeys(skills))


def extract_related_agents(content: str) -> List[str]:
    agents = re.findall(r'subagent_type[=:]\s*["\']?([A-Za-z][A-Za-z0-9-]*)["\']?', content, re.IGNORECASE)
    agents += re.findall(
        r'Task.*?(?:subagent_type|agent)[=:]\s*["\']?([A-Za-z][A-Za-z0-9-]*)["\']?', content, re.IGNORECASE
    )
    return list(dict.fromkeys(agent.lower() for agent in agents))


def extract_flow_chart(content: str) -> Optional[str]:
    """A ```dot / ```graphviz block, or a bare ``digraph { ... }``."""
    fenced = re.search(r'```(?:dot|graphviz)\s*\n(.*?)```', content, re.IGNORECASE | re.DOTALL)
    if fenced:
        return fenced.group(1).strip()

    digraph = re.search(r'digraph\s+\w+\s*\{.*?\}', content, re.IGNORECASE | re.DOTALL)
    if digraph:
        return digraph.group(0).strip()

    return None


def extract_key_points(content: str) -> List[str]:
    points: List[str] = []

    principles = re.search(r'##\s*Key Principles?\s*\n(.*?)(?=\n##|\Z)', content, re.IGNORECASE | re.DOTALL)
    if principles:
        items = re.findall(r'^[-*]\s+\*\*([^*]+)\*\*', principles.group(1), re.MULTILINE)
        points.extend(item.strip() for item in items[:MAX_KEY_POINTS])

    core = re.search(r'\*\*Core principle:\*\*\s*(.+)', content, re.IGNORECASE)
    if core:
        points.append(core.group(1).strip())

    iron_law = re.search(r'##\s*The Iron Law\s*\n```\s*\n(.+)\n```', content, re.IGNORECASE)
    if iron_law:
        points.append(iron_law.group(1).strip())

    return points


def extract_skill_metadata(content: str) -> SkillMetadata:
    """
    Build the full SkillMetadata record for a document.

    Raises:
        FrontmatterError: If the frontmatter block is not valid YAML
    """
    return SkillMetadata(
        name=extract_skill_name(content),
        triggers=extract_triggers(content),
        related_skills=extract_related_skills(content),
        related_agents=extract_related_agents(content),
        examples=extract_examples(content),
        flow_chart=extract_flow_chart(content),
        key_points=extract_key_points(content),
    )
