"""Base CRUD class for Flask blueprints."""
from flask import jsonify, request
from typing import Type, Optional, Dict, Any, Callable, List
from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.orm import DeclarativeBase
from shared.validation import ValidationError
from ..models import db
from ..utils import api_error, pydantic_to_validation_error, parse_csv_arg
import logging


class CRUDBase:
    """Base class providing the row store operations for one table.

    This class encapsulates common patterns for:
    - Row selection with column projection, equality filters and ordering
    - Single row retrieval
    - Row insertion with pydantic validation
    - Row deletion

    Subclasses set:
    - create_schema - pydantic model validating inserted rows
    - filters - query argument name -> parser for equality filters
    - default_order - ordering used when the request gives none
    """

    create_schema: Optional[Type[BaseModel]] = None
    filters: Dict[str, Callable[[str], Any]] = {}
    default_order: Optional[str] = None
    default_limit = 100
    max_limit = 500

    def __init__(self, model_class: Type[DeclarativeBase], logger_name: Optional[str] = None):
        """Initialize CRUD base class.

        Args:
            model_class: SQLAlchemy model class
            logger_name: Optional logger name (defaults to class name)
        """
        self.model = model_class
        self.logger = logging.getLogger(logger_name or self.__class__.__name__)

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.model.__table__.columns]

    def parse_columns(self, value) -> Optional[List[str]]:
        """Validate a 'a,b,c' column projection; None selects every column."""
        columns = parse_csv_arg(value)
        if not columns:
            return None
        unknown = [c for c in columns if c not in self.column_names]
        if unknown:
            raise ValidationError(f"Unknown columns: {', '.join(unknown)}")
        return columns

    def parse_order(self, value):
        """Turn '<column>.asc|desc' into an ORDER BY clause."""
        value = value or self.default_order
        if not value:
            return None
        column_name, _, direction = value.partition('.')
        direction = direction or 'asc'
        if column_name not in self.column_names:
            raise ValidationError(f"Cannot order by unknown column '{column_name}'")
        if direction not in ('asc', 'desc'):
            raise ValidationError(f"Order direction must be 'asc' or 'desc', got '{direction}'")
        column = getattr(self.model, column_name)
        return column.desc() if direction == 'desc' else column.asc()

    def parse_filters(self, args) -> Dict[str, Any]:
        parsed = {}
        for name, parser in self.filters.items():
            if name in args:
                parsed[name] = parser(args[name])
        return parsed

    def parse_limit(self, value) -> int:
        if value is None:
            return self.default_limit
        try:
            limit = int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"limit must be an integer, got '{value}'")
        if limit < 1:
            raise ValidationError("limit must be at least 1")
        return min(limit, self.max_limit)

    def get_list(self, args) -> tuple:
        """Select rows according to the request's query arguments.

        Args:
            args: Request query arguments (columns, order, limit and filters)

        Returns:
            Flask JSON response with the selected rows
        """
        try:
            columns = self.parse_columns(args.get('columns'))
            order = self.parse_order(args.get('order'))
            filters = self.parse_filters(args)
            limit = self.parse_limit(args.get('limit'))
        except ValidationError as e:
            return api_error(str(e), 400)

        try:
            query = select(self.model).filter_by(**filters)
            if order is not None:
                query = query.order_by(order)
            rows = db.session.execute(query.limit(limit)).scalars().all()
        except Exception as e:
            self.logger.error(f"Failed to select {self.get_plural_name()}: {e}", exc_info=True)
            return api_error(f'Failed to select {self.get_plural_name()}', 500, 'error')

        return jsonify({self.get_plural_name(): [self.serialize(row, columns) for row in rows]})

    def get_detail(self, resource_id) -> tuple:
        resource = db.session.get(self.model, resource_id)
        if resource is None:
            return api_error(f'{self.get_singular_name().title()} {resource_id} not found', 404)
        return jsonify(self.serialize(resource))

    def create(self) -> tuple:
        """Insert one row and return it as stored, with id and created_at."""
        try:
            data = self.get_json_data()
            validated_data = self.validate_create_data(data)

            resource = self.model(**validated_data)
            db.session.add(resource)
            db.session.commit()

            self.logger.info(f"Created {self.get_singular_name()}: {resource.id}")
            return jsonify(self.serialize(resource)), 201

        except ValidationError as e:
            self.logger.warning(f"Validation error in {self.get_singular_name()} creation: {e}")
            return jsonify({'error': str(e)}), 400
        except Exception as e:
            self.logger.error(f"Failed to create {self.get_singular_name()}: {e}", exc_info=True)
            db.session.rollback()
            return jsonify({'error': f'Failed to create {self.get_singular_name()}'}), 500

    def delete(self, resource_id) -> tuple:
        resource = db.session.get(self.model, resource_id)
        if resource is None:
            return api_error(f'{self.get_singular_name().title()} {resource_id} not found', 404)
        try:
            db.session.delete(resource)
            db.session.commit()
            self.logger.info(f"Deleted {self.get_singular_name()}: {resource_id}")
            return jsonify({'message': f'{self.get_singular_name().title()} deleted successfully'})
        except Exception as e:
            self.logger.error(f"Failed to delete {self.get_singular_name()}: {e}", exc_info=True)
            db.session.rollback()
            return jsonify({'error': f'Failed to delete {self.get_singular_name()}'}), 500

    def serialize(self, resource: DeclarativeBase, columns: Optional[List[str]] = None) -> Dict[str, Any]:
        """Serialize a row through the model's to_dict, optionally restricted to some columns."""
        return resource.to_dict(columns)

    def get_json_data(self) -> Dict[str, Any]:
        """Get and validate JSON data from request.

        Raises:
            ValidationError: If JSON is invalid or not a dict
        """
        data = request.get_json(silent=True)
        if data is None:
            raise ValidationError('Request body must contain valid JSON')
        if not isinstance(data, dict):
            raise ValidationError('Request data must be a JSON object')
        return data

    def validate_create_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Validate a row with create_schema.

        Raises:
            ValidationError: If validation fails
        """
        if self.create_schema is None:
            return data
        try:
            return self.create_schema(**data).model_dump()
        except PydanticValidationError as e:
            raise pydantic_to_validation_error(e)

    def get_singular_name(self) -> str:
        table_name = self.model.__tablename__
        if table_name.endswith('s'):
            return table_name[:-1]
        return table_name

    def get_plural_name(self) -> str:
        return self.model.__tablename__
