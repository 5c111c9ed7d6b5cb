"""
Etsy Design Optimizer — Main Pipeline

Usage:
  python -m etsy_optimizer.main --images flyer.png flyer_alt.jpg
  python -m etsy_optimizer.main --images flyer.png --output outputs/flyer --no-images
  python -m etsy_optimizer.main --checkout pro
  python -m etsy_optimizer.main --confirm-url "https://example.com/?plan=pro&session_id=cs_123"
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
import time
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table

from .checkout import PAYMENT_LINKS, PRICES, checkout_url, confirm_upgrade
from .errors import EtsyOptimizerError, LimitReached, NothingToExport
from .gemini_service import GeminiService
from .models import GeneratedImage, ImageStatus
from .orchestrator import ListingOrchestrator, RunState
from .usage import DEFAULT_STATE_DIR, JsonFileRepository, UsageStore
from .zip_exporter import create_listing_zip

load_dotenv()

logging.basicConfig(
    format="%(asctime)s — %(levelname)s — %(name)s — %(message)s",
    level=logging.WARNING,
)

console = Console()

OUTPUTS_ROOT = Path("outputs")

_STATUS_STYLE = {
    ImageStatus.PENDING: "[dim]… pending[/dim]",
    ImageStatus.COMPLETED: "[green]✓ completed[/green]",
    ImageStatus.FAILED: "[red]✗ failed[/red]",
}


# ── CLI ───────────────────────────────────────────────────────────────────────

def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Etsy Design Optimizer — product images to listing copy and mockups"
    )
    parser.add_argument(
        "--images",
        nargs="+",
        default=[],
        help="1-5 PNG/JPG images of the same product",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Output directory (default: outputs/<timestamp>)",
    )
    parser.add_argument(
        "--state-dir",
        default=str(DEFAULT_STATE_DIR),
        help="Where the plan and daily usage record is kept",
    )
    parser.add_argument(
        "--confirm-url",
        default=None,
        help="Return URL from the payment page; applies its ?plan= upgrade",
    )
    parser.add_argument(
        "--checkout",
        choices=sorted(PAYMENT_LINKS),
        default=None,
        help="Print the payment link for a plan and exit",
    )
    parser.add_argument(
        "--email",
        default=None,
        help="Email to attach to the local profile",
    )
    parser.add_argument(
        "--no-images",
        action="store_true",
        help="Stop after analysis (no copy, no mockups)",
    )
    return parser.parse_args()


# ── Output helpers ────────────────────────────────────────────────────────────

def display_analysis(orchestrator: ListingOrchestrator) -> None:
    a = orchestrator.analysis
    colors = escape(", ".join(a.dominant_colors))
    lines = [
        f"[bold]Theme:[/bold] {escape(a.theme)}",
        f"[bold]Product type:[/bold] {a.product_type}  [dim]({a.category.value})[/dim]",
        f"[bold]Occasion/Use:[/bold] {escape(a.event_type)}",
        f"[bold]Colors:[/bold] {colors}",
        f"[bold]Key elements:[/bold] {escape(', '.join(a.key_text))}",
    ]
    if a.style:
        lines.append(f"[bold]Style:[/bold] {escape(a.style)}")
    if a.target_audience:
        lines.append(f"[bold]Audience:[/bold] {escape(a.target_audience)}")
    console.print(Panel("\n".join(lines), title="Product Analysis", border_style="cyan"))


def display_copy(orchestrator: ListingOrchestrator) -> None:
    copy = orchestrator.copy
    if copy is None:
        console.print(f"  [yellow]⚠ {orchestrator.copy_error or 'No listing copy generated.'}[/yellow]")
        return
    body = (
        f"[bold]{escape(copy.title)}[/bold]\n\n"
        f"{escape(copy.description)}\n\n"
        f"[bold]Tags:[/bold] {escape(', '.join(copy.tags))}\n"
        f"[bold]Materials:[/bold] {escape(', '.join(copy.materials)) or '—'}"
    )
    console.print(Panel(body, title="Listing Copy", border_style="green"))


def display_mockups(images) -> None:
    table = Table(title="Mockups", show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Status")
    for i, img in enumerate(images, start=1):
        table.add_row(str(i), escape(img.name), _STATUS_STYLE[img.status])
    console.print(table)


def display_upsell(store: UsageStore) -> None:
    lines = [f"You've used all {store.daily_limit} free generations for today.\n"]
    for plan, url in PAYMENT_LINKS.items():
        lines.append(f"[bold]{PRICES[plan]}[/bold]\n  {url}")
    lines.append("\n[dim]After paying, rerun with --confirm-url <return URL>.[/dim]")
    console.print(Panel("\n".join(lines), title="Upgrade to Pro", border_style="magenta"))


def _on_image(image: GeneratedImage) -> None:
    if image.status != ImageStatus.PENDING:
        console.print(f"    {_STATUS_STYLE[image.status]}  {escape(image.name)}")


def _on_progress(msg: str) -> None:
    if msg:
        console.print(f"  [dim]→ {msg}[/dim]")


# ── Main ──────────────────────────────────────────────────────────────────────

async def run_listing(args: argparse.Namespace, store: UsageStore, output_dir: Path) -> int:
    orchestrator = ListingOrchestrator(
        GeminiService(),
        store,
        on_progress=_on_progress,
        on_image=_on_image,
    )
    uploads = orchestrator.set_uploads([Path(p) for p in args.images])
    if orchestrator.error:
        console.print(f"  [yellow]⚠ {orchestrator.error}[/yellow]")
    console.print(f"  [dim]Using {len(uploads)} image(s)[/dim]")

    # ── Step 1: Analyze ───────────────────────────────────────────────────────
    console.print("\n[bold]Step 1/3 — Analyzing product images (Gemini)[/bold]")
    t0 = time.time()
    await orchestrator.analyze()
    if orchestrator.state == RunState.FAILED:
        console.print(f"  [bold red]Error:[/bold red] {orchestrator.error}")
        return 1
    console.print(f"  [green]✓ Done in {time.time() - t0:.1f}s[/green]")
    display_analysis(orchestrator)

    if args.no_images:
        console.print("\n  [dim]Generation skipped (--no-images)[/dim]")
        return 0

    # ── Step 2: Copy + mockups ────────────────────────────────────────────────
    remaining = store.remaining()
    console.print(
        "\n[bold]Step 2/3 — Generating listing copy and mockups (Gemini)[/bold]  "
        f"[dim]{'unlimited' if remaining == float('inf') else f'{remaining} left today'}[/dim]"
    )
    t1 = time.time()
    try:
        images = await orchestrator.generate_assets()
    except LimitReached:
        display_upsell(store)
        return 2
    if orchestrator.state != RunState.DONE:
        console.print(f"  [bold red]Error:[/bold red] {orchestrator.error}")
        return 1

    n_ok = sum(1 for img in images if img.status == ImageStatus.COMPLETED)
    console.print(f"  [green]✓ {n_ok}/{len(images)} mockup(s) — {time.time() - t1:.1f}s[/green]")
    display_mockups(images)
    display_copy(orchestrator)

    # ── Step 3: Export ────────────────────────────────────────────────────────
    console.print("\n[bold]Step 3/3 — Writing ZIP[/bold]")
    try:
        zip_path = create_listing_zip(orchestrator.export_bundle(), output_dir)
    except NothingToExport as e:
        console.print(f"  [yellow]⚠ {e}[/yellow]")
        return 1
    if zip_path is None:
        console.print("  [bold red]Error:[/bold red] could not write the ZIP file.")
        return 1

    console.print(
        Panel(
            f"{n_ok} mockup(s) + listing copy\n"
            f"Saved to: [bold]{zip_path}[/bold]",
            title="[bold green]Listing Assets Ready[/bold green]",
            border_style="green",
        )
    )
    return 0


def main() -> None:
    args = parse_args()
    store = UsageStore(JsonFileRepository(Path(args.state_dir).expanduser()))

    if args.checkout:
        console.print(
            Panel(
                f"{PRICES[args.checkout]}\n{checkout_url(args.checkout)}",
                title="Checkout",
                border_style="magenta",
            )
        )
        return

    if args.confirm_url:
        plan, cleaned = confirm_upgrade(args.confirm_url, store)
        if plan:
            console.print(f"  [green]✓ Upgraded to {plan}[/green]  [dim]{cleaned}[/dim]")
        else:
            console.print("  [yellow]⚠ No plan found in the return URL.[/yellow]")

    if args.email:
        store.set_email(args.email)

    if not args.images:
        if not (args.confirm_url or args.email):
            console.print("[bold red]Error:[/bold red] pass --images with 1-5 PNG/JPG files.")
            sys.exit(1)
        return

    _check_env()

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    output_dir = Path(args.output) if args.output else OUTPUTS_ROOT / timestamp

    console.print(Rule("[bold magenta]Etsy Design Optimizer[/bold magenta]"))
    console.print(
        f"  Plan: [bold]{store.get_state().plan.upper()}[/bold]  |  "
        f"Images: [bold]{len(args.images)}[/bold]  |  "
        f"Output: [bold]{output_dir}[/bold]"
    )

    try:
        code = asyncio.run(run_listing(args, store, output_dir))
    except EtsyOptimizerError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        code = 1
    sys.exit(code)


def _check_env() -> None:
    """Check required environment variables."""
    if not os.environ.get("GEMINI_API_KEY"):
        console.print("[bold red]Error:[/bold red] GEMINI_API_KEY not set.")
        console.print("Create a .env file from .env.example and add your keys.")
        sys.exit(1)


if __name__ == "__main__":
    main()
