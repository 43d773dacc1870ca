import click

from cinebook.extensions import db
from cinebook.utils.tmdb import import_now_playing


def register_commands(app):
    @app.cli.command("init-db")
    def init_db():
        """Create the users, movies, bookings and seats tables."""
        db.create_all()
        click.echo("Database tables created.")

    @app.cli.command("import-movies")
    @click.option("--limit", default=20, show_default=True, help="Maximum movies to import.")
    def import_movies(limit):
        """Import now-playing movies from TMDB into the catalog."""
        db.create_all()
        added = import_now_playing(limit=limit)
        for movie in added:
            click.echo(f"Added: {movie.title} ({movie.genre}, {movie.rating}/10)")
        click.echo(f"Imported {len(added)} movies.")
