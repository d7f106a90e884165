"""Tests for pull request drafts."""

from datetime import UTC, datetime

from headerguard.analyzers.evaluator import evaluate_all
from headerguard.fixes.builder import build_fixes
from headerguard.fixes.pull_request import (
    DEFAULT_TITLE,
    branch_name,
    build_pull_request,
    prepare_patches,
)


class TestPullRequestDraft:
    def test_branch_name(self):
        now = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
        assert branch_name(now) == "security-headers-fix-20240102030405"

    def test_prepare_patches(self, sample_fixes):
        patches = prepare_patches(
            sample_fixes, ["nginx", "vercel"], {"vercel": '{"cleanUrls": true}'}
        )

        assert [p.name for p in patches] == ["nginx", "vercel"]
        assert [p.path for p in patches] == [
            "nginx/security-headers.conf",
            "vercel.json",
        ]
        assert all(p.validation.valid for p in patches)
        assert patches[1].config.has_content

    def test_build_pull_request(self, weak_headers):
        fixes = build_fixes(evaluate_all(weak_headers))
        patches = prepare_patches(fixes, ["nginx", "netlify"])

        draft = build_pull_request(
            fixes,
            patches,
            url="https://example.com/",
            score=42,
            grade="F",
            branch="security-headers-fix-test",
        )

        assert draft.title == DEFAULT_TITLE
        assert draft.branch == "security-headers-fix-test"
        assert set(draft.files) == {"nginx/security-headers.conf", "_headers"}
        assert "Current score: **42/100 (F)**" in draft.body
        assert "| X-Frame-Options | update | `DENY` |" in draft.body
        referrer = "| Referrer-Policy | add | `strict-origin-when-cross-origin` |"
        assert referrer in draft.body
        assert "- `_headers` (netlify, new file)" in draft.body
        assert (
            "- [Content-Security-Policy](https://developer.mozilla.org/en-US/docs/"
            "Web/HTTP/Headers/Content-Security-Policy)"
        ) in draft.body
        assert "### Review notes" not in draft.body

    def test_review_notes_list_warnings(self, sample_fixes):
        patches = prepare_patches(sample_fixes, ["nginx"], {"nginx": "gzip on;\n"})

        draft = build_pull_request(sample_fixes, patches, title="Harden headers")

        assert draft.title == "Harden headers"
        assert draft.branch.startswith("security-headers-fix-")
        assert "### Review notes" in draft.body
        assert "- `nginx/security-headers.conf` (nginx, updated)" in draft.body
