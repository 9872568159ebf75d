import click

from roomshare.services.booking_service import get_booking_service


def register_commands(app):

    @app.cli.command('complete-bookings')
    def complete_bookings():
        """Mark confirmed bookings whose end has passed as completed."""
        count = get_booking_service().complete_elapsed()
        click.echo(f"{count} bookings marked as completed.")
