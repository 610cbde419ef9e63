import re
from itertools import accumulate

from markdown_it import MarkdownIt
from markdown_it.common.utils import unescapeAll
from markdown_it.token import Token
from mdit_py_plugins.front_matter import front_matter_plugin

from ..core.model import Range
from ..core.ports import ParserStrategy
from ..core.tree import LinkType, Node, NodeKind

NEWLINE_RE = re.compile(r"\r\n|\r|\n")

INLINE_RE = re.compile(
    r"(?P<escape>\\[^\w\s])"
    r"|(?P<code>(?P<ticks>`+)(?P<code_text>.+?)(?<!`)(?P=ticks)(?!`))"
    r"|(?P<wiki>(?P<wiki_bang>!)?\[\[(?P<wiki_target>[^\[\]|\n]+)(?:\|(?P<wiki_label>[^\[\]\n]*))?\]\])"
    r"|(?P<link>(?P<bang>!)?\[(?P<label>(?:\\.|[^\[\]\\\n])*)\]\(\s*"
    r"(?P<dest><[^<>\n]*>|(?:\\.|[^\s()\\]|\((?:\\.|[^\s()\\])*\))*)"
    r"(?:\s+(?P<title>\"(?:\\.|[^\"\\])*\"|'(?:\\.|[^'\\])*'|\((?:\\.|[^()\\])*\)))?\s*\))"
)

# A trailing `^id`, either at the start of the line or after whitespace
MARKER_TAIL_RE = re.compile(r"(?:(?<=\s)|(?<![\s\S]))\^[A-Za-z0-9-]+(?=\s*$)")

ITEM_MARKER_RE = re.compile(r"[ \t>]*?([-+*]|\d{1,9}[.)])([ \t]+|$)")

OPEN_KINDS = {
    "paragraph_open": NodeKind.PARAGRAPH,
    "heading_open": NodeKind.HEADING,
    "bullet_list_open": NodeKind.LIST,
    "ordered_list_open": NodeKind.LIST,
    "list_item_open": NodeKind.ITEM,
    "blockquote_open": NodeKind.BLOCK_QUOTE,
    "table_open": NodeKind.TABLE,
    "thead_open": NodeKind.TABLE_HEAD,
    "tr_open": NodeKind.TABLE_ROW,
    "th_open": NodeKind.TABLE_CELL,
    "td_open": NodeKind.TABLE_CELL,
}

LEAF_KINDS = {
    "front_matter": NodeKind.FRONTMATTER,
    "fence": NodeKind.CODE_BLOCK,
    "code_block": NodeKind.CODE_BLOCK,
    "hr": NodeKind.RULE,
    "html_block": NodeKind.HTML,
}


class _Source:
    """Raw note text with line and UTF-8 byte offset lookups."""

    def __init__(self, text: str):
        self.text = text
        self.offsets = list(accumulate((len(c.encode("utf-8")) for c in text), initial=0))
        # (start, end without newline, end with newline) in chars
        self.lines: list[tuple[int, int, int]] = []
        pos = 0
        for m in NEWLINE_RE.finditer(text):
            self.lines.append((pos, m.start(), m.end()))
            pos = m.end()
        self.lines.append((pos, len(text), len(text)))

    @property
    def size(self) -> int:
        return self.offsets[-1]

    def byte(self, char_pos: int) -> int:
        return self.offsets[char_pos]

    def line_start(self, line: int) -> int:
        if line >= len(self.lines):
            return self.size
        return self.byte(self.lines[line][0])

    def body(self, line: int) -> str:
        if line >= len(self.lines):
            return ""
        start, end, _ = self.lines[line]
        return self.text[start:end]

    def block_range(self, start_line: int, end_line: int) -> Range:
        # Blank lines swallowed at the end of a block are not part of it
        while end_line > start_line + 1 and not self.body(end_line - 1).strip():
            end_line -= 1
        return Range(self.line_start(start_line), self.line_start(end_line))

    def locate(self, line: int, content: str, cursor: int = 0) -> tuple[int, str]:
        """
        Char position of ``content`` inside raw line ``line`` at or after
        ``cursor`` (a column), and the segment actually found there.
        """
        line_pos = self.lines[min(line, len(self.lines) - 1)][0]
        body = self.body(line)
        for candidate in (body, body.rstrip()):
            col = len(candidate) - len(content)
            if col >= cursor and candidate.endswith(content):
                return line_pos + col, content
        col = body.find(content, cursor)
        if col == -1:
            # Tabs in the indentation may have been expanded
            content = content.lstrip()
            col = body.find(content, cursor)
        if col == -1:
            # Content was rewritten by the block parser; scan the raw rest of the line
            col = min(cursor, len(body))
            return line_pos + col, body[col:]
        return line_pos + col, content


class MarkdownParser(ParserStrategy):
    """
    Markdown parser built on markdown-it-py.

    markdown-it supplies the block structure and line maps; inline content
    is rescanned on the raw lines so wikilinks, embeds and ``^id`` markers
    get exact byte ranges.
    """

    def __init__(self) -> None:
        self.md = MarkdownIt("commonmark").enable("table").use(front_matter_plugin)

    def parse(self, text: str) -> Node:
        src = _Source(text)
        root = Node(NodeKind.DOCUMENT, Range(0, src.size))
        # Open blocks: (node or None for a skipped wrapper, its line map)
        stack: list[tuple[Node | None, list[int]]] = [(root, [0, len(src.lines)])]
        cell_cursors: dict[int, int] = {}

        for tok in self.md.parse(text):
            parent = next(node for node, _ in reversed(stack) if node is not None)
            line_map = tok.map or stack[-1][1]

            if tok.nesting == 1:
                kind = OPEN_KINDS.get(tok.type)
                if kind is None or (kind == NodeKind.TABLE_ROW and parent.kind == NodeKind.TABLE_HEAD):
                    stack.append((None, line_map))
                    continue
                node = Node(kind, src.block_range(line_map[0], line_map[1]))
                if kind == NodeKind.PARAGRAPH:
                    node.tight = tok.hidden
                elif kind == NodeKind.HEADING:
                    node.level = int(tok.tag[1:])
                elif kind == NodeKind.ITEM:
                    node.indent = self._item_indent(src, line_map[0], stack)
                parent.children.append(node)
                stack.append((node, line_map))
            elif tok.nesting == -1:
                stack.pop()
            elif tok.type == "inline" and parent.kind == NodeKind.TABLE_CELL:
                self._cell(src, tok.content, line_map[0], parent, cell_cursors)
            elif tok.type == "inline":
                self._inline(src, tok, line_map, parent)
            elif tok.type in LEAF_KINDS:
                node = Node(LEAF_KINDS[tok.type], src.block_range(line_map[0], line_map[1]))
                if tok.type == "front_matter":
                    node.text = tok.content
                parent.children.append(node)

        return root

    def _item_indent(
        self, src: _Source, line: int, stack: list[tuple[Node | None, list[int]]]
    ) -> int | None:
        # Nested items may start on the line of their parent item (`- - a`)
        col = 0
        for node, line_map in reversed(stack):
            if node is not None and node.kind == NodeKind.ITEM and line_map[0] == line:
                col = node.indent or 0
                break
        body = src.body(line)
        m = ITEM_MARKER_RE.match(body, col)
        if not m:
            return None
        end = m.end()
        if len(m.group(2)) > 4:
            end = m.start(2) + 1
        line_pos = src.lines[line][0]
        return src.byte(line_pos + end) - src.byte(line_pos)

    def _inline(self, src: _Source, tok: Token, line_map: list[int], parent: Node) -> None:
        content_lines = tok.content.split("\n")
        for i, content in enumerate(content_lines):
            line = line_map[0] + i
            last = i == len(content_lines) - 1
            if content:
                pos, segment = src.locate(line, content)
                if i == 0 and parent.kind == NodeKind.PARAGRAPH:
                    # A paragraph starts at its text, after any list or quote markers
                    parent.range = Range(src.byte(pos), parent.range.end)
                parent.children.extend(self._scan(src, segment, pos, last))
            if not last:
                _, end, end_nl = src.lines[min(line, len(src.lines) - 1)]
                parent.children.append(
                    Node(NodeKind.SOFT_BREAK, Range(src.byte(end), src.byte(end_nl)))
                )

    def _cell(self, src: _Source, content: str, line: int, cell: Node, cursors: dict[int, int]) -> None:
        # Cells of one row share a line; each is searched after the previous one
        line_pos = src.lines[min(line, len(src.lines) - 1)][0]
        cursor = cursors.get(line, 0)
        if not content:
            cell.range = Range(src.byte(line_pos + cursor), src.byte(line_pos + cursor))
            return
        pos, segment = src.locate(line, content, cursor)
        cursors[line] = pos - line_pos + len(segment)
        cell.range = Range(src.byte(pos), src.byte(pos + len(segment)))
        cell.children.extend(self._scan(src, segment, pos, True))

    def _scan(self, src: _Source, s: str, base: int, last_line: bool) -> list[Node]:
        """Scan one line of inline content starting at char ``base``."""

        def rng(start: int, end: int) -> Range:
            return Range(src.byte(base + start), src.byte(base + end))

        nodes: list[Node] = []
        pending = 0

        def flush(end: int) -> None:
            if end > pending:
                text = unescapeAll(s[pending:end])
                nodes.append(Node(NodeKind.TEXT, rng(pending, end), text=text))

        for m in INLINE_RE.finditer(s):
            if m.group("escape"):
                continue
            flush(m.start())
            pending = m.end()

            if m.group("code"):
                nodes.append(Node(NodeKind.CODE, rng(m.start(), m.end()), text=m.group("code_text")))
            elif m.group("wiki"):
                nodes.append(self._wikilink(m, rng))
            else:
                nodes.append(self._link(m, rng))

        if last_line:
            marker = MARKER_TAIL_RE.search(s, pending)
            if marker:
                flush(marker.start())
                nodes.append(Node(NodeKind.TEXT, rng(marker.start(), marker.end()), text=marker.group()))
                pending = len(s)
        flush(len(s))
        return nodes

    def _wikilink(self, m: re.Match, rng) -> Node:
        kind = NodeKind.IMAGE if m.group("wiki_bang") else NodeKind.LINK
        node = Node(
            kind,
            rng(m.start(), m.end()),
            link_type=LinkType.WIKILINK,
            dest_url=m.group("wiki_target"),
            has_pothole=m.group("wiki_label") is not None,
        )
        group = "wiki_label" if node.has_pothole else "wiki_target"
        if m.group(group):
            node.children.append(
                Node(NodeKind.TEXT, rng(m.start(group), m.end(group)), text=m.group(group))
            )
        return node

    def _link(self, m: re.Match, rng) -> Node:
        kind = NodeKind.IMAGE if m.group("bang") else NodeKind.LINK
        dest = m.group("dest")
        if dest.startswith("<") and dest.endswith(">"):
            dest = dest[1:-1]
        title = m.group("title")
        node = Node(
            kind,
            rng(m.start(), m.end()),
            link_type=LinkType.INLINE,
            dest_url=dest,
            title=title[1:-1] if title else "",
        )
        if m.group("label"):
            node.children.append(
                Node(
                    NodeKind.TEXT,
                    rng(m.start("label"), m.end("label")),
                    text=unescapeAll(m.group("label")),
                )
            )
        return node
