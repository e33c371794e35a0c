"""Pytest configuration and fixtures.

HTML fixtures are trimmed copies of current rustdoc output, keeping only
the markup the extractor reads.
"""

from unittest.mock import AsyncMock

import httpx
import pytest

MODULE_HTML = """<!DOCTYPE html>
<html lang="en"><head><title>serde - Rust</title></head>
<body class="rustdoc mod crate"><main><div class="width-limiter">
<section id="main-content" class="content">
<div class="main-heading"><h1>Crate <span>serde</span></h1></div>
<details class="toggle top-doc" open><summary class="hideme"><span>Expand description</span></summary>
<div class="docblock">
<p>Serde is a framework for <em><strong>ser</strong></em>ializing and <em><strong>de</strong></em>serializing Rust data structures efficiently and generically.</p>
<h2 id="design"><a class="doc-anchor" href="#design">§</a>Design</h2>
<p>Where many other languages rely on runtime reflection, Serde instead is built on Rust's powerful trait system.</p>
</div></details>
<h2 id="modules" class="section-header">Modules<a href="#modules" class="anchor">§</a></h2>
<dl class="item-table">
<dt><a class="mod" href="de/index.html" title="mod serde::de">de</a></dt>
<dd>Generic data structure deserialization framework.</dd>
<dt><a class="mod" href="ser/index.html" title="mod serde::ser">ser</a></dt>
<dd>Generic data structure serialization framework.</dd>
</dl>
<h2 id="macros" class="section-header">Macros<a href="#macros" class="anchor">§</a></h2>
<dl class="item-table">
<dt><a class="macro" href="macro.forward_to_deserialize_any.html">forward_<wbr>to_<wbr>deserialize_<wbr>any</a></dt>
<dd>Helper macro when implementing the <code>Deserializer</code> part of a new data format.</dd>
</dl>
<h2 id="traits" class="section-header">Traits<a href="#traits" class="anchor">§</a></h2>
<dl class="item-table">
<dt><a class="trait" href="trait.Deserialize.html" title="trait serde::Deserialize">Deserialize</a></dt>
<dd>A <strong>data structure</strong> that can be deserialized from any data format supported by Serde.</dd>
<dt><a class="trait" href="trait.Legacy.html" title="trait serde::Legacy">Legacy</a><wbr><span class="stab deprecated" title="">Deprecated</span></dt>
<dd>An old trait kept for compatibility.</dd>
</dl>
<h2 id="constants" class="section-header">Constants<a href="#constants" class="anchor">§</a></h2>
<ul class="item-table">
<li><div class="item-name"><a class="constant" href="constant.MAX_DEPTH.html">MAX_DEPTH</a></div><div class="desc docblock-short">The <a href="struct.Depth.html">largest</a> nesting depth. See <a href="https://serde.rs/">serde.rs</a>.</div></li>
</ul>
</section></div></main></body></html>
"""

FUNCTION_HTML = """<!DOCTYPE html>
<html lang="en"><head><title>swap in std::mem - Rust</title></head>
<body class="rustdoc fn"><main><div class="width-limiter">
<section id="main-content" class="content">
<div class="main-heading"><h1>Function <span class="fn">swap</span></h1></div>
<pre class="rust item-decl"><code>pub const fn swap&lt;T&gt;(x: &amp;mut T, y: &amp;mut T)</code></pre>
<details class="toggle top-doc" open><summary class="hideme"><span>Expand description</span></summary>
<div class="docblock">
<p>Swaps the values at two mutable locations, without deinitializing either one.</p>
<ul><li>If you want to swap with a default value, see <a href="fn.take.html" title="fn std::mem::take"><code>take</code></a>.</li></ul>
<h2 id="examples"><a class="doc-anchor" href="#examples">§</a>Examples</h2>
<div class="example-wrap"><pre class="rust rust-example-rendered"><code><span class="kw">let </span><span class="kw-2">mut </span>x = <span class="number">5</span>;</code></pre></div>
<h2 id="see-also"><a class="doc-anchor" href="#see-also">§</a>See also</h2>
<p>The <a href="https://doc.rust-lang.org/nomicon/">Rustonomicon</a>.</p>
</div></details>
</section></div></main></body></html>
"""

STRUCT_HTML = """<!DOCTYPE html>
<html lang="en"><head><title>Mutex in tokio::sync - Rust</title></head>
<body class="rustdoc struct"><main><div class="width-limiter">
<section id="main-content" class="content">
<div class="main-heading"><h1>Struct <span class="struct">Mutex</span></h1></div>
<pre class="rust item-decl"><code>pub struct Mutex&lt;T: ?Sized&gt; { <span class="comment">/* private fields */</span> }</code></pre>
<span class="item-info"><div class="stab portability">Available on <strong>crate feature <code>sync</code></strong> only.</div></span>
<details class="toggle top-doc" open><summary class="hideme"><span>Expand description</span></summary>
<div class="docblock">
<p>An asynchronous <code>Mutex</code>-like type.</p>
<h2 id="methods"><a class="doc-anchor" href="#methods">§</a>Methods</h2>
<p>Prose about methods written by the crate author.</p>
</div></details>
<h2 id="implementations" class="section-header">Implementations<a href="#implementations" class="anchor">§</a></h2>
<div id="implementations-list">
<details class="toggle implementors-toggle" open><summary><section id="impl-Mutex%3CT%3E" class="impl"><h3 class="code-header">impl&lt;T: ?Sized&gt; Mutex&lt;T&gt;</h3></section></summary>
<div class="impl-items">
<details class="toggle method-toggle" open><summary><section id="method.new" class="method"><h4 class="code-header">pub fn <a href="#method.new" class="fn">new</a>(t: T) -&gt; Self</h4></section></summary>
<div class="docblock"><p>Creates a new lock in an unlocked state ready for use.</p></div></details>
<details class="toggle method-toggle" open><summary><section id="method.lock" class="method"><h4 class="code-header">pub async fn <a href="#method.lock" class="fn">lock</a>(&amp;self) -&gt; MutexGuard&lt;'_, T&gt;</h4></section></summary>
<div class="docblock">
<p>Locks this mutex, causing the current task to yield until the lock has been acquired.</p>
<h5 id="cancel-safety"><a class="doc-anchor" href="#cancel-safety">§</a>Cancel safety</h5>
<p>This method uses a queue to fairly distribute locks.</p>
</div></details>
<section id="method.blocking_lock" class="method"><h4 class="code-header">pub fn <a href="#method.blocking_lock" class="fn">blocking_lock</a>(&amp;self) -&gt; MutexGuard&lt;'_, T&gt;</h4></section>
<span class="item-info"><div class="stab deprecated"><span class="emoji">👎</span><span>Deprecated since 1.0: use lock</span></div></span>
</div></details>
</div>
<h2 id="trait-implementations" class="section-header">Trait Implementations<a href="#trait-implementations" class="anchor">§</a></h2>
<div id="trait-implementations-list">
<details class="toggle implementors-toggle" open><summary><section id="impl-Debug-for-Mutex%3CT%3E" class="impl"><h3 class="code-header">impl&lt;T&gt; Debug for Mutex&lt;T&gt;</h3></section></summary>
<div class="impl-items"><details class="toggle method-toggle" open><summary><section id="method.fmt" class="method trait-impl"><h4 class="code-header">fn <a href="#method.fmt" class="fn">fmt</a>(&amp;self, f: &amp;mut Formatter&lt;'_&gt;) -&gt; Result</h4></section></summary><div class="docblock"><p>Formats the value using the given formatter.</p></div></details></div>
</details>
</div>
<h2 id="synthetic-implementations" class="section-header">Auto Trait Implementations<a href="#synthetic-implementations" class="anchor">§</a></h2>
<div id="synthetic-implementations-list">
<section id="impl-Send-for-Mutex%3CT%3E" class="impl"><h3 class="code-header">impl&lt;T&gt; Send for Mutex&lt;T&gt;</h3></section>
</div>
</section></div></main></body></html>
"""

TRAIT_HTML = """<!DOCTYPE html>
<html lang="en"><head><title>Deserialize in serde - Rust</title></head>
<body class="rustdoc trait"><main><div class="width-limiter">
<section id="main-content" class="content">
<div class="main-heading"><h1>Trait <span class="trait">Deserialize</span></h1></div>
<pre class="rust item-decl"><code>pub trait Deserialize&lt;'de&gt;: Sized { ... }</code></pre>
<details class="toggle top-doc" open><summary class="hideme"><span>Expand description</span></summary>
<div class="docblock">
<p>A <strong>data structure</strong> that can be deserialized from any data format supported by Serde.</p>
<h2 id="lifetime"><a class="doc-anchor" href="#lifetime">§</a>Lifetime</h2>
<p>The <code>'de</code> lifetime of this trait is the lifetime of data that may be borrowed by <code>Self</code>.</p>
</div></details>
<h2 id="required-methods" class="section-header">Required Methods<a href="#required-methods" class="anchor">§</a></h2>
<div class="methods">
<details class="toggle method-toggle" open><summary><section id="tymethod.deserialize" class="method"><h4 class="code-header">fn <a href="#tymethod.deserialize" class="fn">deserialize</a>&lt;D&gt;(deserializer: D) -&gt; Result&lt;Self, D::Error&gt;</h4></section></summary>
<div class="docblock"><p>Deserialize this value from the given Serde deserializer.</p></div></details>
</div>
<h2 id="foreign-impls" class="section-header">Implementations on Foreign Types<a href="#foreign-impls" class="anchor">§</a></h2>
<details class="toggle implementors-toggle"><summary><section id="impl-Deserialize%3C'de%3E-for-bool" class="impl"><h3 class="code-header">impl&lt;'de&gt; Deserialize&lt;'de&gt; for bool</h3></section></summary>
<div class="impl-items"></div></details>
<h2 id="implementors" class="section-header">Implementors<a href="#implementors" class="anchor">§</a></h2>
<div id="implementors-list">
<section id="impl-Deserialize%3C'de%3E-for-IgnoredAny" class="impl"><h3 class="code-header">impl&lt;'de&gt; Deserialize&lt;'de&gt; for IgnoredAny</h3></section>
</div>
</section></div></main></body></html>
"""

UNSTABLE_STRUCT_HTML = """<!DOCTYPE html>
<html lang="en"><head><title>Simd in core::simd - Rust</title></head>
<body class="rustdoc struct"><main><div class="width-limiter">
<section id="main-content" class="content">
<div class="main-heading"><h1>Struct <span class="struct">Simd</span></h1></div>
<pre class="rust item-decl"><code>pub struct Simd&lt;T, const N: usize&gt;(/* private fields */);</code></pre>
<span class="item-info"><div class="stab unstable">Nightly only (<code>portable_simd</code>)</div></span>
<details class="toggle top-doc" open><summary class="hideme"><span>Expand description</span></summary>
<div class="docblock"><p>A SIMD vector with the shape of <code>[T; N]</code>.</p></div></details>
<h2 id="implementations" class="section-header">Implementations<a href="#implementations" class="anchor">§</a></h2>
<div id="implementations-list">
<details class="toggle implementors-toggle" open><summary><section id="impl-Simd%3CT,+N%3E" class="impl"><h3 class="code-header">impl&lt;T, const N: usize&gt; Simd&lt;T, N&gt;</h3></section></summary>
<div class="impl-items">
<details class="toggle method-toggle" open><summary><section id="method.gather_or" class="method"><h4 class="code-header">pub fn <a href="#method.gather_or" class="fn">gather_or</a>(slice: &amp;[T], idxs: Simd&lt;usize, N&gt;) -&gt; Self</h4></section><span class="item-info"><div class="stab portability">Available on <strong>x86-64</strong> only.</div><div class="stab unstable">Nightly only (<code>portable_simd</code>)</div></span></summary>
<div class="docblock"><p>Reads from potentially discontiguous indices in <code>slice</code> to construct a SIMD vector.</p></div></details>
</div></details>
</div>
</section></div></main></body></html>
"""

NOT_RUSTDOC_HTML = "<html><body><h1>404</h1><p>Nothing here.</p></body></html>"

SERDE_ORIGIN = "https://docs.rs/serde/1.0.210/serde/"


def make_response(
    url: str, status_code: int = 200, text: str = "", headers: dict | None = None
) -> httpx.Response:
    """Build a real httpx.Response bound to a GET request for ``url``."""
    return httpx.Response(
        status_code,
        text=text,
        headers=headers,
        request=httpx.Request("GET", url),
    )


def make_client(routes: dict) -> AsyncMock:
    """Create a mock AsyncClient whose ``get`` answers from ``routes``.

    ``routes`` maps a URL to an ``httpx.Response``, a page body (200), or
    an exception to raise. Unknown URLs answer 404.
    """

    async def route_get(url, **kwargs):
        route = routes.get(url)
        if isinstance(route, BaseException):
            raise route
        if isinstance(route, httpx.Response):
            return route
        if isinstance(route, str):
            return make_response(url, text=route)
        return make_response(url, 404, text="not found")

    client = AsyncMock(spec=httpx.AsyncClient)
    client.get = AsyncMock(side_effect=route_get)
    return client


@pytest.fixture
def serde_redirect():
    """docs.rs redirect answer for ``/serde``."""
    return make_response(
        "https://docs.rs/serde",
        302,
        headers={"location": "/serde/1.0.210/serde/"},
    )
