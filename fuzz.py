#!/usr/bin/env python3
"""
Random fuzzer for the SVG validator.
Generates hostile and malformed SVG to check that validation only ever
fails with a policy rejection or a parse error, never hangs, and never
accepts a payload that is known to be dangerous.
"""

import argparse
import random
import re
import string
import sys
import time
import traceback

from safesvg import ParseError, SVGValidationError, Validator

SVG_OPEN = '<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink">'

# Fuzzing strategies
TAGS = [
    "g", "path", "rect", "circle", "ellipse", "line", "polyline", "polygon", "text", "tspan",
    "defs", "use", "symbol", "image", "a", "lineargradient", "radialgradient", "stop", "clippath",
    "mask", "pattern", "filter", "fegaussianblur", "title", "desc", "metadata", "switch", "marker",
    # Never whitelisted by default
    "script", "style", "foreignObject", "iframe", "animate", "set", "handler", "listener",
]

ATTRIBUTES = [
    "id", "class", "style", "href", "xlink:href", "fill", "stroke", "d", "x", "y", "width",
    "height", "transform", "viewBox", "opacity", "xml:space", "xml:base",
    "onload", "onclick", "onmouseover", "data-x", "foo:bar",
]

HOSTILE_VALUES = [
    "javascript:alert(1)",
    " JaVaScRiPt:alert(1)",
    "javascript:",
    "data:image/svg+xml;base64,PHN2Zz48L3N2Zz4=",
    "data:text/html;base64,PHNjcmlwdD4=",
    "data:image/png;base64,iVBORw0KGgo=",
    "#frag",
    "url(#g)",
    "url(http://evil.example/x)",
]

CSS_SNIPPETS = [
    ".a{fill:red}",
    ".a{fill:url(#g)}",
    "@import 'x.css';",
    ".a{background:url(//evil.example/x)}",
    '.a{background:url("http://evil.example/x")}',
    ".a{width:expression(alert(1))}",
    ".a{color:rgb(0,0,0)}",
    "@media print{.a{opacity:0.5}}",
    ".a{background:url(a b)}",
    "/* comment */",
]

SPECIAL_CHARS = [
    "\x01", "\x0b", "\x0c", "\x7f",  # Control chars
    "\ufffd",  # Replacement character
    "\u00a0",  # Non-breaking space
    "\u2028", "\u2029",  # Line/paragraph separators
    "\u200b", "\ufeff",  # Zero-width chars
]

ENTITIES = [
    "&amp;", "&lt;", "&gt;", "&quot;", "&apos;",
    "&", "&amp", "&#", "&#x", "&#123;", "&#x1f;", "&#0;", "&#x110000;", "&unknown;",
]


def random_string(min_len=0, max_len=20):
    """Generate random ASCII string."""
    length = random.randint(min_len, max_len)
    return "".join(random.choices(string.ascii_letters + string.digits, k=length))


def fuzz_tag_name():
    strategies = [
        lambda: random.choice(TAGS),
        lambda: random.choice(TAGS).upper(),
        lambda: random.choice(TAGS) + random_string(1, 5),
        lambda: "svg:" + random.choice(TAGS),
        lambda: random_string(1, 10),
        lambda: random.choice(SPECIAL_CHARS) + random.choice(TAGS),
    ]
    return random.choice(strategies)()


def fuzz_attribute():
    name = random.choice([
        lambda: random.choice(ATTRIBUTES),
        lambda: random.choice(ATTRIBUTES).upper(),
        lambda: "on" + random_string(2, 8),
        lambda: random_string(1, 10),
    ])()
    value = random.choice([
        lambda: random_string(0, 30),
        lambda: random.choice(HOSTILE_VALUES),
        lambda: random.choice(CSS_SNIPPETS),
        lambda: random.choice(ENTITIES),
        lambda: "#" + random.choice(["a", "b", "c", "d"]),
    ])()
    quote = random.choice(['"', "'"])
    return f" {name}={quote}{value.replace(quote, '')}{quote}"


def fuzz_element(depth=0, max_depth=6):
    """Generate a (mostly) well-formed element subtree."""
    name = fuzz_tag_name()
    attrs = "".join(fuzz_attribute() for _ in range(random.randint(0, 4)))
    if depth >= max_depth or random.random() < 0.3:
        return f"<{name}{attrs}/>"
    children = "".join(fuzz_node(depth + 1, max_depth) for _ in range(random.randint(0, 4)))
    return f"<{name}{attrs}>{children}</{name}>"


def fuzz_node(depth, max_depth):
    choice = random.random()
    if choice < 0.6:
        return fuzz_element(depth, max_depth)
    if choice < 0.75:
        return random_string(0, 10) + random.choice(ENTITIES)
    if choice < 0.85:
        return f"<!--{random_string(0, 10)}-->"
    if choice < 0.95:
        return f"<![CDATA[{random.choice(CSS_SNIPPETS)}]]>"
    return f"<?{random.choice(['xml-stylesheet', 'php', 'x'])} {random_string(0, 10)}?>"


def fuzz_style_element():
    sheet = "".join(random.choices(CSS_SNIPPETS, k=random.randint(1, 4)))
    if random.random() < 0.5:
        sheet = f"<![CDATA[{sheet}]]>"
    return f"<style>{sheet}</style>"


def fuzz_doctype():
    variants = [
        "",
        '<!DOCTYPE svg PUBLIC "-//W3C//DTD SVG 1.1//EN" "http://www.w3.org/Graphics/SVG/1.1/DTD/svg11.dtd">',
        '<!DOCTYPE svg [<!ENTITY xxe SYSTEM "file:///etc/passwd">]>',
        '<!DOCTYPE svg [<!ENTITY a "lol"><!ENTITY b "&a;&a;&a;&a;">]>',
        '<!DOCTYPE svg [<!ENTITY % p SYSTEM "http://evil.example/x.dtd">]>',
    ]
    return random.choice(variants)


def fuzz_reference_bomb():
    """Groups where each level references the previous one many times.

    The groups are nested, declared side by side, or side by side in
    reverse so every reference points forward.
    """
    levels = random.randint(1, 8)
    refs = random.randint(1, 12)
    shape = random.choice(["nested", "siblings", "reversed"])
    if shape == "nested":
        inner = '<g id="l0"><rect width="1" height="1"/></g>'
        for level in range(1, levels):
            inner = f'<g id="l{level}">' + inner + f'<use xlink:href="#l{level - 1}"/>' * refs + "</g>"
        return inner
    parts = ['<g id="l0"><rect width="1" height="1"/></g>']
    for level in range(1, levels):
        parts.append(f'<g id="l{level}">' + f'<use xlink:href="#l{level - 1}"/>' * refs + "</g>")
    if shape == "reversed":
        parts.reverse()
    return "".join(parts)


def fuzz_mutation(doc):
    """Corrupt a document at the byte level."""
    if not doc:
        return doc
    pos = random.randrange(len(doc))
    strategies = [
        lambda: doc[:pos],
        lambda: doc[:pos] + doc[pos + 1 :],
        lambda: doc[:pos] + random.choice("<>&\"'/=") + doc[pos:],
        lambda: doc[:pos] + random.choice(SPECIAL_CHARS) + doc[pos:],
        lambda: doc + doc,
    ]
    return random.choice(strategies)()


def generate_fuzzed_svg():
    """Generate a complete fuzzed SVG document."""
    parts = [fuzz_doctype(), SVG_OPEN]
    for _ in range(random.randint(1, 10)):
        part = random.choices(
            [fuzz_element, fuzz_style_element, fuzz_reference_bomb],
            weights=[80, 10, 10],
        )[0]
        parts.append(part())
    parts.append("</svg>")
    doc = "".join(parts)
    if random.random() < 0.2:
        doc = fuzz_mutation(doc)
    return doc


KNOWN_BAD = [
    ("script element", re.compile(r"<script\b", re.I)),
    ("javascript scheme", re.compile(r"""=\s*["']\s*javascript:""", re.I)),
    ("event handler", re.compile(r"\son\w+\s*=", re.I)),
    ("entity declaration", re.compile(r"<!ENTITY\b", re.I)),
]


def accepted_known_bad(doc):
    """Label of the first dangerous construct found outside comments, or None."""
    body = re.sub(r"<!--.*?-->", "", doc, flags=re.S)
    for label, pattern in KNOWN_BAD:
        if pattern.search(body):
            return label
    return None


def run_fuzzer(num_tests, seed=None, verbose=False, save_failures=False, max_references=None):
    """Run the fuzzer against the validator."""
    if seed is not None:
        random.seed(seed)

    if max_references is None:
        validator = Validator()
    else:
        validator = Validator(max_references=max_references)

    crashes = []
    hangs = []
    escapes = []
    rejected = 0
    accepted = 0

    print(f"Fuzzing {validator!r} with {num_tests} test cases...")
    start_time = time.time()

    for i in range(num_tests):
        doc = generate_fuzzed_svg()

        if verbose and i % 100 == 0:
            print(f"  Test {i}/{num_tests}...")

        start = time.perf_counter()
        try:
            validator.validate(doc)
        except (SVGValidationError, ParseError):
            rejected += 1
        except Exception as e:
            crashes.append({
                "test_num": i,
                "svg": doc,
                "error": repr(e),
                "traceback": traceback.format_exc(),
            })
            if verbose:
                print(f"  CRASH: Test {i}: {e!r}")
        else:
            accepted += 1
            label = accepted_known_bad(doc)
            if label is not None:
                escapes.append({"test_num": i, "svg": doc, "label": label})
                if verbose:
                    print(f"  ESCAPE: Test {i}: accepted {label}")
        elapsed = time.perf_counter() - start

        # Check for hangs (>5 seconds)
        if elapsed > 5.0:
            hangs.append({
                "test_num": i,
                "svg": doc,
                "time": elapsed,
            })
            if verbose:
                print(f"  HANG: Test {i} took {elapsed:.2f}s")

    elapsed_total = time.time() - start_time

    # Report results
    print(f"\n{'='*60}")
    print("FUZZING RESULTS")
    print(f"{'='*60}")
    print(f"Total tests:    {num_tests}")
    print(f"Accepted:       {accepted}")
    print(f"Rejected:       {rejected}")
    print(f"Crashes:        {len(crashes)}")
    print(f"Escapes:        {len(escapes)}")
    print(f"Hangs (>5s):    {len(hangs)}")
    print(f"Total time:     {elapsed_total:.2f}s")
    print(f"Tests/second:   {num_tests/elapsed_total:.1f}")

    if crashes:
        print(f"\n{'='*60}")
        print("CRASH DETAILS:")
        print(f"{'='*60}")
        for crash in crashes[:10]:  # Show first 10
            print(f"\nTest #{crash['test_num']}:")
            print(f"  SVG: {crash['svg'][:200]!r}...")
            print(f"  Error: {crash['error']}")
        if len(crashes) > 10:
            print(f"\n... and {len(crashes) - 10} more crashes")

    if escapes:
        print(f"\n{'='*60}")
        print("ESCAPE DETAILS:")
        print(f"{'='*60}")
        for escape in escapes[:10]:
            print(f"\nTest #{escape['test_num']} ({escape['label']}):")
            print(f"  SVG: {escape['svg'][:200]!r}...")

    if hangs:
        print(f"\n{'='*60}")
        print("HANG DETAILS:")
        print(f"{'='*60}")
        for hang in hangs[:5]:
            print(f"\nTest #{hang['test_num']} ({hang['time']:.2f}s):")
            print(f"  SVG: {hang['svg'][:200]!r}...")

    if save_failures and (crashes or escapes or hangs):
        filename = f"fuzz_failures_{int(time.time())}.txt"
        with open(filename, "w") as f:
            f.write("Fuzzing results for safesvg\n")
            f.write(f"Seed: {seed}\n\n")
            for crash in crashes:
                f.write(f"=== CRASH #{crash['test_num']} ===\n")
                f.write(f"SVG:\n{crash['svg']}\n")
                f.write(f"Error: {crash['error']}\n")
                f.write(f"Traceback:\n{crash['traceback']}\n\n")
            for escape in escapes:
                f.write(f"=== ESCAPE #{escape['test_num']} ({escape['label']}) ===\n")
                f.write(f"SVG:\n{escape['svg']}\n\n")
            for hang in hangs:
                f.write(f"=== HANG #{hang['test_num']} ({hang['time']:.2f}s) ===\n")
                f.write(f"SVG:\n{hang['svg']}\n\n")
        print(f"\nFailures saved to {filename}")

    return not crashes and not escapes and not hangs


def main():
    parser = argparse.ArgumentParser(description="Fuzz the SVG validator with hostile input")
    parser.add_argument(
        "--num-tests", "-n",
        type=int,
        default=1000,
        help="Number of test cases to generate (default: 1000)",
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help="Random seed for reproducibility",
    )
    parser.add_argument(
        "--max-references",
        type=int,
        default=None,
        help="Reference amplification bound passed to the validator",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--save-failures",
        action="store_true",
        help="Save failures to a file",
    )
    parser.add_argument(
        "--sample",
        type=int,
        metavar="N",
        help="Just print N sample fuzzed SVG documents (no validation)",
    )

    args = parser.parse_args()

    if args.sample:
        if args.seed:
            random.seed(args.seed)
        for i in range(args.sample):
            print(f"=== Sample {i+1} ===")
            print(generate_fuzzed_svg())
            print()
        return

    success = run_fuzzer(
        args.num_tests,
        seed=args.seed,
        verbose=args.verbose,
        save_failures=args.save_failures,
        max_references=args.max_references,
    )

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
