"""Platform patch generators: render a fix set as platform-native configuration.

Generators are pure string renderers. Platforms that support incremental
updates parse the caller-supplied existing content into a HeaderDocument,
merge the fixes and serialize it back; everything else emits a complete,
self-contained file.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping

import yaml

from headerguard.analyzers.models import EvaluatedHeader
from headerguard.fixes.builder import build_fixes
from headerguard.fixes.document import HeaderDocument
from headerguard.fixes.models import FrameworkConfig, Platform, SecurityFix

logger = logging.getLogger(__name__)

CATCH_ALL_ROUTE = "/(.*)"


def _js_string(value: str) -> str:
    # JSON string literals are valid JavaScript string literals
    return json.dumps(value, ensure_ascii=False)


def _quoted(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


class PatchGenerator(ABC):
    """Base class for platform patch generators."""

    #: Whether existing configuration content is merged rather than replaced
    incremental: bool = False

    @property
    @abstractmethod
    def platform(self) -> Platform:
        pass

    def generate(self, config: FrameworkConfig | None, fixes: list[SecurityFix]) -> str:
        """Render ``fixes`` for this platform, merging into ``config`` if supported."""
        config = config or FrameworkConfig.for_platform(self.platform)
        fixes = list(fixes)

        if self.incremental and config.has_content:
            merged = self._merge(config.content, fixes)
            if merged is not None:
                return merged
            logger.warning(
                f"Could not merge into existing {config.config_file}, "
                "emitting a complete file instead"
            )

        return self._render(HeaderDocument.from_fixes(fixes))

    @abstractmethod
    def _render(self, document: HeaderDocument) -> str:
        """Render a complete, self-contained configuration file."""
        pass

    def _merge(self, content: str, fixes: list[SecurityFix]) -> str | None:
        """Merge fixes into existing content; None when content is unusable."""
        return None


class NginxGenerator(PatchGenerator):
    platform = Platform.NGINX

    def _render(self, document: HeaderDocument) -> str:
        lines = ["# Security headers - include this file in your nginx server block"]
        lines += [
            f"add_header {key} {_quoted(value)} always;"
            for key, value in document.pairs()
        ]
        return "\n".join(lines) + "\n"


class ApacheGenerator(PatchGenerator):
    platform = Platform.APACHE

    def _render(self, document: HeaderDocument) -> str:
        lines = [
            "# Security headers - add to your .htaccess or VirtualHost",
            "<IfModule mod_headers.c>",
        ]
        lines += [
            f"    Header always set {key} {_quoted(value)}"
            for key, value in document.pairs()
        ]
        lines.append("</IfModule>")
        return "\n".join(lines) + "\n"


class ExpressGenerator(PatchGenerator):
    platform = Platform.EXPRESS

    def _render(self, document: HeaderDocument) -> str:
        lines = [
            "// Security headers middleware",
            "function securityHeaders(req, res, next) {",
        ]
        lines += [
            f"  res.setHeader({_js_string(key)}, {_js_string(value)});"
            for key, value in document.pairs()
        ]
        lines += [
            "  next();",
            "}",
            "",
            "module.exports = securityHeaders;",
        ]
        return "\n".join(lines) + "\n"


class NextJSGenerator(PatchGenerator):
    """next.config.js ``headers()`` block; merges into an existing headers array."""

    platform = Platform.NEXTJS
    incremental = True

    HEADERS_ARRAY = re.compile(r"\bheaders\s*:\s*\[")
    ENTRY = re.compile(
        r"""\{\s*key\s*:\s*(?P<kq>['"`])(?P<key>.*?)(?P=kq)\s*,\s*"""
        r"""value\s*:\s*(?P<vq>['"`])(?P<value>.*?)(?P=vq)\s*,?\s*\}""",
        re.DOTALL,
    )

    def _render(self, document: HeaderDocument) -> str:
        entries = "\n".join(
            f"          {self._entry(key, value)},"
            for key, value in document.pairs()
        )
        lines = [
            "/** @type {import('next').NextConfig} */",
            "const nextConfig = {",
            "  async headers() {",
            "    return [",
            "      {",
            f"        source: {_js_string(CATCH_ALL_ROUTE)},",
            "        headers: [",
        ]
        if entries:
            lines.append(entries)
        lines += [
            "        ],",
            "      },",
            "    ];",
            "  },",
            "};",
            "",
            "module.exports = nextConfig;",
        ]
        return "\n".join(lines) + "\n"

    def _merge(self, content: str, fixes: list[SecurityFix]) -> str | None:
        match = self.HEADERS_ARRAY.search(content)
        if not match:
            return None

        body_start = match.end()
        body_end = _find_closing_bracket(content, body_start)
        if body_end is None:
            return None

        body = content[body_start:body_end]
        pending = HeaderDocument.from_fixes(fixes)

        def replace(entry: re.Match) -> str:
            fix = pending.pop(entry.group("key"))
            if fix is None:
                return entry.group(0)
            return self._entry(fix.key, fix.value)

        body = self.ENTRY.sub(replace, body)

        if len(pending):
            indent = self._entry_indent(body, content, match.start())
            stripped = self._terminate_last_entry(body.rstrip())
            added = "".join(
                f"\n{indent}{self._entry(key, value)},"
                for key, value in pending.pairs()
            )
            closing_indent = body[len(body.rstrip()):]
            if "\n" not in closing_indent:
                closing_indent = "\n" + indent[:-2]
            body = stripped + added + closing_indent

        return content[:body_start] + body + content[body_end:]

    @staticmethod
    def _entry(key: str, value: str) -> str:
        return f"{{ key: {_js_string(key)}, value: {_js_string(value)} }}"

    @staticmethod
    def _terminate_last_entry(body: str) -> str:
        """Make sure the last code line of the array body ends with a comma."""
        lines = body.split("\n")
        for index in range(len(lines) - 1, -1, -1):
            code = lines[index].strip()
            if not code or code.startswith(("//", "/*", "*")):
                continue
            if not code.endswith((",", "[")):
                lines[index] = lines[index].rstrip() + ","
            break
        return "\n".join(lines)

    @staticmethod
    def _entry_indent(body: str, content: str, array_pos: int) -> str:
        for line in body.splitlines():
            if line.strip().startswith("{"):
                return line[: len(line) - len(line.lstrip())]
        line_start = content.rfind("\n", 0, array_pos) + 1
        base = content[line_start:array_pos]
        return base[: len(base) - len(base.lstrip())] + "  "


class VercelGenerator(PatchGenerator):
    """vercel.json ``headers`` section."""

    platform = Platform.VERCEL
    incremental = True

    def _render(self, document: HeaderDocument) -> str:
        data = {"headers": [self._route(document)]}
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"

    def _merge(self, content: str, fixes: list[SecurityFix]) -> str | None:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.warning(f"Existing vercel.json is not valid JSON: {e}")
            return None
        if not isinstance(data, dict):
            return None

        routes = data.setdefault("headers", [])
        if not isinstance(routes, list):
            return None

        route = next(
            (
                r
                for r in routes
                if isinstance(r, dict) and r.get("source") == CATCH_ALL_ROUTE
            ),
            None,
        )
        if route is None:
            routes.append(self._route(HeaderDocument.from_fixes(fixes)))
        else:
            route["headers"] = _merge_key_value_list(route.get("headers"), fixes)

        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"

    @staticmethod
    def _route(document: HeaderDocument) -> dict:
        return {
            "source": CATCH_ALL_ROUTE,
            "headers": [{"key": k, "value": v} for k, v in document.pairs()],
        }


class _HeaderYamlDumper(yaml.SafeDumper):
    """Double-quote anything that is not a bare identifier so values stay verbatim."""


def _represent_str(dumper: yaml.SafeDumper, value: str):
    style = None if re.fullmatch(r"[A-Za-z][A-Za-z0-9_-]*", value) else '"'
    return dumper.represent_scalar("tag:yaml.org,2002:str", value, style=style)


_HeaderYamlDumper.add_representer(str, _represent_str)


class AmplifyGenerator(PatchGenerator):
    """AWS Amplify ``customHttp.yml``."""

    platform = Platform.AMPLIFY
    incremental = True
    PATTERN = "**"

    def _render(self, document: HeaderDocument) -> str:
        data = {"customHeaders": [self._rule(document)]}
        return self._dump(data)

    def _merge(self, content: str, fixes: list[SecurityFix]) -> str | None:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            logger.warning(f"Existing customHttp.yml is not valid YAML: {e}")
            return None
        if not isinstance(data, dict):
            return None

        rules = data.setdefault("customHeaders", [])
        if not isinstance(rules, list):
            return None

        rule = next(
            (
                r
                for r in rules
                if isinstance(r, dict) and r.get("pattern") == self.PATTERN
            ),
            None,
        )
        if rule is None:
            rules.append(self._rule(HeaderDocument.from_fixes(fixes)))
        else:
            rule["headers"] = _merge_key_value_list(rule.get("headers"), fixes)

        return self._dump(data)

    def _rule(self, document: HeaderDocument) -> dict:
        return {
            "pattern": self.PATTERN,
            "headers": [{"key": k, "value": v} for k, v in document.pairs()],
        }

    @staticmethod
    def _dump(data: dict) -> str:
        return yaml.dump(
            data,
            Dumper=_HeaderYamlDumper,
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
            width=4096,
        )


class NetlifyGenerator(PatchGenerator):
    """Netlify ``_headers`` file; merges into the ``/*`` block."""

    platform = Platform.NETLIFY
    incremental = True
    PATH = "/*"

    def _render(self, document: HeaderDocument) -> str:
        lines = [self.PATH] + [f"  {key}: {value}" for key, value in document.pairs()]
        return "\n".join(lines) + "\n"

    def _merge(self, content: str, fixes: list[SecurityFix]) -> str | None:
        lines = content.splitlines()
        block_start = next(
            (
                i
                for i, line in enumerate(lines)
                if line.strip() == self.PATH and not line[:1].isspace()
            ),
            None,
        )

        if block_start is None:
            existing = "\n".join(lines).rstrip()
            new_block = self._render(HeaderDocument.from_fixes(fixes))
            return f"{existing}\n\n{new_block}" if existing else new_block

        block_end = block_start + 1
        while block_end < len(lines) and (
            not lines[block_end].strip() or lines[block_end][:1].isspace()
        ):
            block_end += 1
        # Trailing blank lines belong to the gap between blocks
        while block_end > block_start + 1 and not lines[block_end - 1].strip():
            block_end -= 1

        pending = HeaderDocument.from_fixes(fixes)
        block = []
        for line in lines[block_start + 1 : block_end]:
            key, sep, _ = line.strip().partition(":")
            is_header = sep and not line.strip().startswith("#")
            fix = pending.pop(key.strip()) if is_header else None
            if fix is None:
                block.append(line)
                continue
            indent = line[: len(line) - len(line.lstrip())]
            block.append(f"{indent}{fix.key}: {fix.value}")
        block += [f"  {key}: {value}" for key, value in pending.pairs()]

        merged = lines[: block_start + 1] + block + lines[block_end:]
        return "\n".join(merged) + "\n"


class CloudflareGenerator(PatchGenerator):
    """Cloudflare Workers script that stamps headers onto every response."""

    platform = Platform.CLOUDFLARE

    def _render(self, document: HeaderDocument) -> str:
        lines = [
            "// Cloudflare Workers script adding security headers",
            "const SECURITY_HEADERS = {",
        ]
        lines += [
            f"  {_js_string(key)}: {_js_string(value)},"
            for key, value in document.pairs()
        ]
        lines += [
            "};",
            "",
            "export default {",
            "  async fetch(request) {",
            "    const response = await fetch(request);",
            "    const newResponse = new Response(response.body, response);",
            "    for (const [key, value] of Object.entries(SECURITY_HEADERS)) {",
            "      newResponse.headers.set(key, value);",
            "    }",
            "    return newResponse;",
            "  },",
            "};",
        ]
        return "\n".join(lines) + "\n"


class GenericGenerator(PatchGenerator):
    """Plain ``Header: value`` listing used for unsupported platforms."""

    platform = Platform.GENERIC

    def _render(self, document: HeaderDocument) -> str:
        lines = ["# Security headers to add to every response"]
        lines += [f"{key}: {value}" for key, value in document.pairs()]
        return "\n".join(lines) + "\n"


def _merge_key_value_list(
    existing: object, fixes: Iterable[SecurityFix]
) -> list[dict]:
    """Merge fixes into a ``[{"key": ..., "value": ...}]`` list, keeping other items."""
    items = list(existing) if isinstance(existing, list) else []
    pending = HeaderDocument.from_fixes(fixes)

    for item in items:
        if not isinstance(item, dict) or "key" not in item:
            continue
        fix = pending.pop(str(item["key"]))
        if fix is not None:
            item["key"] = fix.key
            item["value"] = fix.value

    items += [{"key": k, "value": v} for k, v in pending.pairs()]
    return items


def _find_closing_bracket(text: str, start: int) -> int | None:
    """
    Index of the ``]`` closing the array whose body starts at ``start``.

    String literals and ``//`` or ``/* */`` comments are skipped, so quotes
    and brackets inside them do not count.
    """
    depth = 1
    quote: str | None = None
    i = start
    while i < len(text):
        char = text[i]
        if quote:
            if char == "\\":
                i += 2
                continue
            if char == quote:
                quote = None
        elif text.startswith("//", i):
            newline = text.find("\n", i)
            if newline == -1:
                return None
            i = newline
            continue
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end == -1:
                return None
            i = end + 2
            continue
        elif char in "'\"`":
            quote = char
        elif char in "[{(":
            depth += 1
        elif char in "]})":
            depth -= 1
            if depth == 0:
                return i if char == "]" else None
        i += 1
    return None


# Registry of available generators
_GENERATOR_REGISTRY: dict[Platform, PatchGenerator] = {
    generator.platform: generator
    for generator in (
        NginxGenerator(),
        ApacheGenerator(),
        ExpressGenerator(),
        NextJSGenerator(),
        VercelGenerator(),
        AmplifyGenerator(),
        NetlifyGenerator(),
        CloudflareGenerator(),
        GenericGenerator(),
    )
}

DEFAULT_PLATFORMS: tuple[Platform, ...] = tuple(
    p for p in Platform if p is not Platform.GENERIC
)


def get_generator(platform: str | Platform | None) -> PatchGenerator:
    """Generator for a platform; unknown platforms get the generic listing."""
    return _GENERATOR_REGISTRY.get(
        Platform.resolve(platform), _GENERATOR_REGISTRY[Platform.GENERIC]
    )


def platform_key(platform: str | Platform) -> str:
    """
    Name a requested platform is reported under.

    Known platforms and their aliases map to the canonical name ("next.js"
    becomes "nextjs"); unknown names are kept, lower-cased.
    """
    resolved = Platform.resolve(platform)
    if resolved is not Platform.GENERIC or isinstance(platform, Platform):
        return resolved.value
    return str(platform).strip().lower() or Platform.GENERIC.value


def render_patches(
    fixes: list[SecurityFix],
    platforms: Iterable[str | Platform] | None = None,
    existing_configs: Mapping[str, FrameworkConfig | str] | None = None,
) -> dict[str, str]:
    """Render a fix set for each requested platform."""
    patches: dict[str, str] = {}
    for platform in platforms if platforms is not None else DEFAULT_PLATFORMS:
        key = platform_key(platform)
        config = resolve_config(platform, existing_configs)
        patches[key] = get_generator(platform).generate(config, fixes)
    return patches


def generate_fixes(
    evaluated: Iterable[EvaluatedHeader],
    platforms: Iterable[str | Platform] | None = None,
    existing_configs: Mapping[str, FrameworkConfig | str] | None = None,
) -> dict[str, str]:
    """Build the fix set for ``evaluated`` and render it for every platform."""
    return render_patches(build_fixes(evaluated), platforms, existing_configs)


def resolve_config(
    platform: str | Platform,
    existing_configs: Mapping[str, FrameworkConfig | str] | None,
) -> FrameworkConfig:
    """Find the caller-supplied config for a platform (raw content is accepted too)."""
    by_key = {platform_key(k): v for k, v in (existing_configs or {}).items()}
    existing = by_key.get(platform_key(platform))
    if isinstance(existing, FrameworkConfig):
        return existing
    return FrameworkConfig.for_platform(platform, content=existing)
