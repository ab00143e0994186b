# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for rule documentation extraction and caching."""

from __future__ import annotations

import asyncio

from gapi_lint.constants import GUIDANCE_PLACEHOLDER
from gapi_lint.errors import ProvisioningError
from gapi_lint.guidance import GuidanceCache, extract_guidance

RULE_URI = "https://linter.aip.dev/131/http-method"

RULE_PAGE = """
<html><body>
<h1 id="get-methods-http-verb">Get methods: HTTP verb</h1>
<h2 id="details">Details</h2>
<p>This rule checks that <code class="language-plaintext highlighter-rouge">Get</code> methods
   use the <a href="https://aip.dev/131">HTTP GET</a> verb &amp; are <em>idempotent</em>
   and <strong>safe</strong>.</p>
<p>A second paragraph that is not part of the summary.</p>
<h2 id="examples">Examples</h2>
<p><strong>Incorrect</strong> code for this rule:</p>
<div class="language-proto highlighter-rouge"><div class="highlight"><pre class="highlight"><code><span class="c1">// Incorrect.</span>
<span class="k">rpc</span> GetBook(GetBookRequest) returns (Book) {
  option (google.api.http) = { post: "/v1/{name=publishers/*/books/*}" };
}
</code></pre></div></div>
<p><strong>Correct</strong> code for this rule:</p>
<div class="language-proto highlighter-rouge"><div class="highlight"><pre class="highlight"><code>map&lt;string, string&gt; labels = 1;
</code></pre></div></div>
<h2 id="disabling">Disabling</h2>
<p><strong>Incorrect</strong> code for this rule:</p>
<div class="language-proto highlighter-rouge"><div class="highlight"><pre><code>ignored</code></pre></div></div>
</body></html>
"""


def test_extract_guidance_renders_details_and_examples() -> None:
    markdown = extract_guidance(RULE_PAGE)

    assert markdown == (
        "**Details:**\n"
        "This rule checks that `Get` methods use the [HTTP GET](https://aip.dev/131) verb & are *idempotent* "
        "and **safe**.\n\n"
        "---\n\n"
        "#### Incorrect Example\n\n"
        "```proto\n"
        "// Incorrect.\n"
        "rpc GetBook(GetBookRequest) returns (Book) {\n"
        '  option (google.api.http) = { post: "/v1/{name=publishers/*/books/*}" };\n'
        "}\n"
        "```\n\n"
        "#### Correct Example\n\n"
        "```proto\n"
        "map<string, string> labels = 1;\n"
        "```\n\n"
    )


def test_extract_guidance_with_details_only() -> None:
    html = '<h2 id="details">Details</h2>\n<p>Fields <b>must</b> have <i>comments</i>.</p>'

    assert extract_guidance(html) == "**Details:**\nFields **must** have *comments*.\n\n"


def test_extract_guidance_falls_back_to_placeholder() -> None:
    assert extract_guidance("<html><body><p>Nothing useful.</p></body></html>") == GUIDANCE_PLACEHOLDER
    assert extract_guidance("") == GUIDANCE_PLACEHOLDER


def test_cache_fetches_each_uri_once(fetcher) -> None:
    fetcher.text[RULE_URI] = RULE_PAGE
    cache = GuidanceCache(fetcher)

    async def scenario() -> tuple[str, str]:
        return await cache.guidance_for(RULE_URI), await cache.guidance_for(RULE_URI)

    first, second = asyncio.run(scenario())

    assert first == second
    assert first.startswith("**Details:**")
    assert fetcher.urls("text") == [RULE_URI]
    assert RULE_URI in cache


def test_cache_does_not_remember_failures(fetcher) -> None:
    cache = GuidanceCache(fetcher)

    failed = asyncio.run(cache.lookup(RULE_URI))
    fetcher.text[RULE_URI] = RULE_PAGE
    recovered = asyncio.run(cache.lookup(RULE_URI))

    assert failed.is_placeholder
    assert not recovered.is_placeholder
    assert recovered.rule_doc_uri == RULE_URI
    assert fetcher.urls("text") == [RULE_URI, RULE_URI]


def test_cache_surfaces_no_errors_for_transport_failures() -> None:
    class Offline:
        async def get_text(self, url: str) -> str:
            raise ProvisioningError(f"Request to {url} failed: connection refused", target=url)

    assert asyncio.run(GuidanceCache(Offline()).guidance_for(RULE_URI)) == GUIDANCE_PLACEHOLDER
