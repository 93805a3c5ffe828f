#!/usr/bin/env python3
"""
Article Translation CLI - Translate a web article to English through the API server

This script drives a running Article Translator server:
- Imports the article (the server fetches and extracts readable HTML)
- Submits it for translation (direct for short articles, chunked job otherwise)
- Follows job progress by polling the status endpoint
- Writes a side-by-side HTML page (original | English)

Usage:
    python translate_article.py https://example.com/story
    python translate_article.py https://example.com/story --output story.html
    python translate_article.py https://example.com/story --no-wait

Examples:
    # Basic usage (will create translated_article.html)
    python translate_article.py "https://lemonde.fr/some-article"

    # Against a server on another host
    python translate_article.py URL --api-url http://translator.local:5000
"""

import argparse
import asyncio
import html
import sys
import time
from pathlib import Path

from api.client import (
    DEFAULT_API_URL,
    ApiClientError,
    TranslationJobError,
    TranslationNotFoundError,
    TranslationTimeoutError,
    TranslatorApiClient,
)

DEFAULT_OUTPUT = "translated_article.html"

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
  body {{ font-family: Georgia, serif; margin: 0; }}
  header {{ padding: 12px 24px; border-bottom: 1px solid #ddd; font-family: sans-serif; }}
  .columns {{ display: flex; }}
  .column {{ flex: 1; padding: 24px; overflow-wrap: anywhere; }}
  .column + .column {{ border-left: 1px solid #ddd; }}
  .translation-error {{ color: #b00020; background: #fdecea; padding: 8px; }}
</style>
</head>
<body>
<header>{title}</header>
<div class="columns">
  <section class="column original"><h2>Original</h2>{original}</section>
  <section class="column translated"><h2>English</h2>{translated}</section>
</div>
</body>
</html>
"""


def render_side_by_side(url: str, original: str, translated: str) -> str:
    """Build the two-column HTML page."""
    return PAGE_TEMPLATE.format(
        title=html.escape(url),
        original=original,
        translated=translated,
    )


def print_progress(status: dict, start_time: float):
    progress = status.get("progress") or {}
    completed = progress.get("completed", 0)
    total = progress.get("total") or 1
    elapsed = int(time.time() - start_time)

    timestamp = time.strftime('%H:%M:%S')
    bar_length = 40
    filled = int(bar_length * completed / total)
    bar = '█' * filled + '░' * (bar_length - filled)

    print(f"\r[{timestamp}] [{bar}] {completed}/{total} chunks | "
          f"Status: {status.get('status', '?'):10s} | Time: {elapsed}s",
          end='', flush=True)


async def translate_article(url: str, output_path: str, api_url: str, wait: bool = True) -> int:
    print(f"\n{'='*70}")
    print("🌐 ARTICLE TRANSLATION - Starting")
    print(f"{'='*70}")
    print(f"URL:    {url}")
    print(f"Output: {output_path}")
    print(f"Server: {api_url}")
    print(f"{'='*70}\n")

    async with TranslatorApiClient(api_url) as client:
        print("📥 Importing article...")
        original = await client.import_article(url)
        print(f"✅ Imported {len(original)} characters")

        outcome = await client.translate(original)

        if "translatedText" in outcome:
            translated = outcome["translatedText"]
        else:
            translation_id = outcome["translationId"]
            print(f"✅ Job submitted: {translation_id} ({outcome['totalChunks']} chunks)")

            if not wait:
                print(f"Monitor at: {api_url}{outcome['pollUrl']}")
                return 0

            start_time = time.time()
            status = await client.wait_for_translation(
                translation_id,
                on_progress=lambda s: print_progress(s, start_time),
            )
            print()
            translated = status["translatedText"]

    Path(output_path).write_text(render_side_by_side(url, original, translated), encoding="utf-8")

    print(f"\n{'='*70}")
    print("✅ Translation completed successfully!")
    print(f"{'='*70}")
    print(f"📄 Output file: {output_path}")
    print(f"{'='*70}\n")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Translate a web article to English and save a side-by-side page",
        epilog="""
Examples:
  %(prog)s https://example.com/story
  %(prog)s https://example.com/story --output story.html
  %(prog)s https://example.com/story --api-url http://localhost:5000 --no-wait
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        'url',
        help='Article URL to translate'
    )

    parser.add_argument(
        '-o', '--output',
        default=DEFAULT_OUTPUT,
        help=f'Output HTML file (default: {DEFAULT_OUTPUT})'
    )

    parser.add_argument(
        '--api-url',
        default=DEFAULT_API_URL,
        help=f'API server URL (default: {DEFAULT_API_URL})'
    )

    parser.add_argument(
        '--no-wait',
        action='store_true',
        help='Submit job and exit (do not wait for completion)'
    )

    args = parser.parse_args(argv)

    try:
        return asyncio.run(translate_article(
            url=args.url,
            output_path=args.output,
            api_url=args.api_url,
            wait=not args.no_wait,
        ))
    except TranslationNotFoundError as e:
        print(f"\n❌ Error: {e} (the job may have expired)", file=sys.stderr)
        return 1
    except TranslationJobError as e:
        print(f"\n❌ Translation failed: {e}", file=sys.stderr)
        return 1
    except TranslationTimeoutError as e:
        print(f"\n❌ Error: {e}", file=sys.stderr)
        return 1
    except ApiClientError as e:
        print(f"\n❌ Error: {e}", file=sys.stderr)
        if e.status_code is None:
            print("Make sure the server is running.", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
