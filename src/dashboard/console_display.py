"""Console display module for rendering the ATM dashboard to the terminal."""

import json
import logging
import unicodedata
from typing import Dict, List, Optional

from ..aggregator.atm_aggregator import ALL, CategoryNode, DashboardSummary

logger = logging.getLogger(__name__)

BAR_WIDTH = 30


def _display_width(text: str) -> int:
    # CJK characters take two terminal columns
    return sum(2 if unicodedata.east_asian_width(ch) in ('W', 'F') else 1 for ch in text)


def _pad(text: str, width: int) -> str:
    return text + ' ' * max(width - _display_width(text), 0)


class ConsoleDisplay:
    """Handles console-based display of ATM dashboard data."""

    def __init__(self, use_colors: bool = True, output_format: str = 'table', include_features: bool = False):
        self.use_colors = use_colors
        self.output_format = output_format
        self.include_features = include_features
        self._setup_colors()
        logger.info("Console Display initialized")

    def __call__(self, summary: DashboardSummary) -> None:
        self.show_dashboard(summary)

    def _setup_colors(self) -> None:
        if self.use_colors:
            self.colors = {
                'reset': '\033[0m',
                'bold': '\033[1m',
                'green': '\033[92m',
                'yellow': '\033[93m',
                'blue': '\033[94m',
                'cyan': '\033[96m',
                'gray': '\033[90m',
            }
        else:
            self.colors = {k: '' for k in ['reset', 'bold', 'green', 'yellow', 'blue', 'cyan', 'gray']}

    def show_dashboard(self, summary: DashboardSummary) -> None:
        if self.output_format == 'json':
            print(json.dumps(summary.to_dict(include_features=self.include_features), ensure_ascii=False, indent=2))
            return
        self._print_header()
        self._print_overview(summary)
        self._print_buckets('🕘 SERVICE HOURS', summary.service_hours)
        self._print_buckets('♿ ACCESSIBILITY', summary.accessibility)
        self._print_buckets('🏦 INSTALL TYPE', summary.install_type)
        self._print_location_hierarchy(summary.location_hierarchy)
        self._print_footer(summary)

    def _print_header(self) -> None:
        print(f"{self.colors['cyan']}{self.colors['bold']}")
        print("╔══════════════════════════════════════════════════════════════╗")
        print("║                       ATM DASHBOARD                          ║")
        print("║                  Locations & Services                        ║")
        print("╚══════════════════════════════════════════════════════════════╝")
        print(self.colors['reset'])

    def _print_overview(self, summary: DashboardSummary) -> None:
        city = '全部縣市' if summary.filter_state.city == ALL else summary.filter_state.city
        bank = '全部銀行' if summary.filter_state.bank == ALL else summary.filter_state.bank
        print(f"\n{self.colors['bold']}📊 OVERVIEW{self.colors['reset']}")
        print("═" * 60)
        print(f"📍 City:        {self.colors['blue']}{city}{self.colors['reset']}")
        print(f"🏛️  Bank:        {self.colors['blue']}{bank}{self.colors['reset']}")
        print(f"🏧 ATMs:        {self.colors['green']}{summary.total_count:,}{self.colors['reset']}")
        print(f"🏦 Banks:       {self.colors['green']}{summary.bank_count}{self.colors['reset']}")

    def _print_buckets(self, title: str, counts: Dict[str, int]) -> None:
        print(f"\n{self.colors['bold']}{title}{self.colors['reset']}")
        print("═" * 60)
        if not counts:
            print(f"{self.colors['yellow']}⚠️  No data for the current filter{self.colors['reset']}")
            return
        label_width = max(_display_width(label) for label in counts)
        peak = max(counts.values())
        for label, n in counts.items():
            bar = '█' * max(1, round(n / peak * BAR_WIDTH))
            print(f"{_pad(label, label_width)}  {self.colors['cyan']}{bar}{self.colors['reset']} {n:,}")

    def _print_location_hierarchy(self, nodes: Optional[List[CategoryNode]]) -> None:
        print(f"\n{self.colors['bold']}🗺️  INSTALL LOCATION CATEGORIES{self.colors['reset']}")
        print("═" * 60)
        if nodes is None:
            print(f"{self.colors['gray']}Hidden: no bank selected or no location data{self.colors['reset']}")
            return
        for node in nodes:
            print(f"{self.colors['bold']}{node.name}{self.colors['reset']} {node.value:,}")
            for child in node.children or []:
                print(f"   └─ {child.name} {child.value:,}")

    def _print_footer(self, summary: DashboardSummary) -> None:
        print(f"\n{self.colors['gray']}" + "─" * 60)
        print(f"Dashboard generated at {summary.last_updated.strftime('%Y-%m-%d %H:%M:%S')}")
        print(f"ATM Dashboard - {len(summary.features['features'])} map points{self.colors['reset']}\n")
