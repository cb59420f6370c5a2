"""Command line front end for the survey client."""
import json
import sys
import click
from pydantic import ValidationError as PydanticValidationError

from shared.form_state import FormStore, SetCoordinates
from shared.schemas import SurveyRecord
from .app import SurveyApp
from .logging_config import setup_logging


@click.group()
@click.pass_context
def cli(ctx):
    """Fire door survey client."""
    setup_logging()
    ctx.obj = SurveyApp()


@cli.command('submit')
@click.argument('record_file', type=click.File('r'))
@click.option('--photo', 'photos', multiple=True, type=click.Path(exists=True, dir_okay=False),
              help='Photo file to attach (repeatable).')
@click.pass_obj
def submit_command(app, record_file, photos):
    """Submit a survey record given as camelCase JSON."""
    try:
        record = SurveyRecord.model_validate(json.load(record_file))
    except (json.JSONDecodeError, PydanticValidationError) as e:
        raise click.ClickException(f"Invalid survey record: {e}")

    position = app.startup()
    app.state.store = FormStore(record)
    if record.coordinates.lat is None or record.coordinates.lng is None:
        app.state.store.dispatch(SetCoordinates(position.lat, position.lng))

    if photos:
        app.photo_handler.add_photos(photos)

    outcome = app.survey_handler.submit()
    if not outcome.submitted:
        sys.exit(1)
    click.echo(outcome.row.get('id'))


@cli.command('list')
@click.option('--door-type', type=click.Choice(['single', 'double']))
@click.option('--failed', is_flag=True, help='Only surveys that failed.')
@click.pass_obj
def list_command(app, door_type, failed):
    """List stored surveys, newest first."""
    filters = {}
    if door_type:
        filters['door_type'] = door_type
    if failed:
        filters['pass_fail'] = False
    for row in app.survey_list_handler.load_surveys(filters):
        verdict = 'PASS' if row.get('pass_fail') else 'FAIL'
        click.echo(f"{row['id']}  {row.get('created_at', '')}  {verdict}  {row.get('location_name') or '-'}")


@cli.command('show')
@click.argument('survey_id')
@click.pass_obj
def show_command(app, survey_id):
    """Print one stored survey as JSON."""
    detail = app.survey_list_handler.load_detail(survey_id)
    if detail is None:
        sys.exit(1)
    click.echo(json.dumps(detail, indent=2))


@cli.command('delete')
@click.argument('survey_id')
@click.pass_obj
def delete_command(app, survey_id):
    """Delete a stored survey and its photos."""
    if not app.survey_list_handler.delete_survey(survey_id):
        sys.exit(1)
    click.echo(f"Deleted {survey_id}")


if __name__ == '__main__':
    cli()
