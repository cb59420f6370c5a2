"""Fire door survey row store blueprint."""
from flask import Blueprint, request
from ..models import FireDoorSurvey
from ..base.crud_base import CRUDBase
from ..utils import parse_bool_arg
from shared.enums import DoorType, InstallationType
from shared.schemas import SurveyRowCreate
from shared.validation import validate_choice

bp = Blueprint('surveys', __name__, url_prefix='/api')


class SurveyCRUD(CRUDBase):
    """Row store operations on the fire_door_surveys table."""

    create_schema = SurveyRowCreate
    filters = {
        'door_type': lambda v: validate_choice(v, 'door_type', [t.value for t in DoorType]),
        'installation_type': lambda v: validate_choice(v, 'installation_type', [t.value for t in InstallationType]),
        'pass_fail': parse_bool_arg,
    }
    default_order = 'created_at.desc'

    def __init__(self):
        super().__init__(FireDoorSurvey, logger_name='surveys')


survey_crud = SurveyCRUD()


@bp.route('/surveys', methods=['GET'])
def get_surveys():
    """Select survey rows, newest first unless another order is given."""
    return survey_crud.get_list(request.args)


@bp.route('/surveys/<survey_id>', methods=['GET'])
def get_survey(survey_id):
    return survey_crud.get_detail(survey_id)


@bp.route('/surveys', methods=['POST'])
def create_survey():
    """Insert one flattened survey row."""
    return survey_crud.create()


@bp.route('/surveys/<survey_id>', methods=['DELETE'])
def delete_survey(survey_id):
    return survey_crud.delete(survey_id)
