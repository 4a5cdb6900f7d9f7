"""
ATM Dashboard - ATM location statistics filtered by city and bank

This application loads the ATM location dataset, applies the configured
city/bank filter and renders the map points and chart data to the console.
Optionally it keeps serving the same data as a JSON API for a browser front-end.
"""

import asyncio
import logging
from src.data.atm_loader import ATMDataLoader
from src.aggregator.atm_aggregator import ATMAggregator, FilterState
from src.dashboard.controller import DashboardController
from src.dashboard.console_display import ConsoleDisplay
from src.dashboard.web_server import run_dashboard_server
from config.settings import load_config, get_filter_defaults, get_log_level

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


async def main():
    """Main application entry point."""
    try:
        logger.info("Starting ATM Dashboard application...")

        # Load configuration
        config = load_config()
        logging.getLogger().setLevel(get_log_level(config))

        # Load the dataset once; it is never modified afterwards
        loader = ATMDataLoader(config['data'])
        records = await loader.load()

        defaults = get_filter_defaults(config)
        controller = DashboardController(
            records,
            aggregator=ATMAggregator(),
            filter_state=FilterState(city=defaults['city'], bank=defaults['bank']),
        )

        # Display results
        logger.info("Displaying dashboard data...")
        display = ConsoleDisplay(
            use_colors=config['app']['use_colors'],
            output_format=config['app']['console_output_format'],
        )
        controller.subscribe(display)

        server = config['server']
        if server['enabled']:
            await run_dashboard_server(controller, server['host'], server['port'])

        logger.info("ATM Dashboard completed successfully!")

    except Exception as e:
        logger.error(f"Application error: {e}")
        raise


if __name__ == "__main__":
    asyncio.run(main())
