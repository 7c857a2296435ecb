"""
Progress bar handling for promo-site using Rich library.

Album discovery fetches one document per album; for sites with a long
back catalogue the CLI shows a progress bar while the store initializes.

Usage:
    from promo_site.core.progress import DiscoveryProgressBar

    with DiscoveryProgressBar(total=12) as progress:
        for album_id in album_ids:
            progress.update(loaded=load(album_id))
"""

from rich import get_console
from rich.progress import BarColumn, Progress, TaskID, TextColumn
from rich.theme import Theme


PROGRESS_THEME = Theme({
    "bar.back": "grey23",
    "bar.complete": "rgb(165,66,129)",
    "bar.finished": "rgb(114,156,31)",
    "bar.pulse": "rgb(165,66,129)",
    "progress.percentage": "white",
})


class DiscoveryProgressBar:
    """
    Progress bar for album discovery.

    Displays:
    - Description (e.g., "Albums")
    - Status: ✓ loaded, ✗ skipped
    - Progress bar
    - Percentage

    Example:
        Albums          ✓ 11  ✗ 1              ━━━━━━━━━━━━━━━━━  100%
    """

    def __init__(self, total: int, description: str = "Albums") -> None:
        self.total = total
        self.description = description
        self.completed = 0
        self.loaded = 0
        self.skipped = 0

        self.console = get_console()

        self.progress = Progress(
            TextColumn("[white]{task.description:<15}"),
            TextColumn("{task.fields[status]:<25}"),
            BarColumn(bar_width=40, finished_style="green"),
            "[progress.percentage]{task.percentage:>3.0f}%",
            console=self.console,
            transient=False,
            refresh_per_second=10,
        )

        self.task_id: TaskID | None = None
        self._started = False

    def __enter__(self) -> "DiscoveryProgressBar":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    def start(self) -> None:
        """Start the progress bar (can be called manually)."""
        if not self._started:
            self.console.push_theme(PROGRESS_THEME)
            self.progress.start()
            self.task_id = self.progress.add_task(
                description=self.description,
                total=self.total,
                status=self._get_status_text(),
            )
            self._started = True

    def stop(self) -> None:
        """Stop the progress bar and restore the console theme."""
        if self._started:
            self.progress.stop()
            self.console.pop_theme()
            self._started = False

    def _get_status_text(self) -> str:
        parts = [f"[green]✓ {self.loaded}[/green]"]
        if self.skipped > 0:
            parts.append(f"[red]✗ {self.skipped}[/red]")
        return "  ".join(parts)

    def update(self, loaded: bool) -> None:
        """
        Record one finished album.

        Args:
            loaded: Whether the album was loaded (False when skipped).
        """
        self.completed += 1
        if loaded:
            self.loaded += 1
        else:
            self.skipped += 1

        if self.task_id is not None:
            self.progress.update(
                self.task_id,
                completed=self.completed,
                status=self._get_status_text(),
            )
