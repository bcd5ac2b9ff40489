"""Main entry point for the photo-trail web server."""

import logging
import sys

import click
import uvicorn


@click.command()
@click.option("--host", default="127.0.0.1", help="Interface to bind.")
@click.option("--port", default=8000, type=int, help="Port to listen on.")
@click.option("--reload", is_flag=True, help="Reload on code changes (development).")
def main(host: str, port: int, reload: bool):
    """Run the web server."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    from .api import config

    click.echo("Starting photo-trail web server...")
    click.echo(f"API documentation: http://{host}:{port}/docs")
    click.echo(f"Database: {config.db_path}")
    click.echo(f"Geocoder: {config.geocoder}")
    click.echo("\nPress Ctrl+C to stop the server")

    uvicorn.run(
        "photo_trail.web.api:app",
        host=host,
        port=port,
        log_level="info",
        reload=reload,
    )


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        click.echo("\nServer stopped by user")
        sys.exit(0)
