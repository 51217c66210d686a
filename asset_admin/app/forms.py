# app/forms.py
from flask_wtf import FlaskForm
from wtforms import BooleanField, DateField, IntegerField, PasswordField, StringField, TextAreaField
from wtforms.validators import AnyOf, DataRequired, Length, Optional, Regexp, ValidationError

from asset_admin.app.errors import BadRequestError

GENDERS = ['Male', 'Female', 'Other']
USER_TYPES = ['Admin', 'Staff']


def validated(form):
    """Return the form's data as a dict, or raise BadRequestError with the field errors."""
    if not form.validate_on_submit():
        messages = [f"{name}: {', '.join(errors)}" for name, errors in form.errors.items()]
        raise BadRequestError('; '.join(messages) or 'Invalid request body')
    data = dict(form.data)
    data.pop('csrf_token', None)
    return data


class LoginForm(FlaskForm):
    username = StringField('Username', validators=[DataRequired(), Length(max=100)])
    password = PasswordField('Password', validators=[DataRequired()])


class ChangePasswordForm(FlaskForm):
    old_password = PasswordField('Old Password', validators=[DataRequired()])
    new_password = PasswordField('New Password', validators=[DataRequired(), Length(min=8, max=64)])


class AssetForm(FlaskForm):
    category_id = IntegerField('Category', validators=[DataRequired()])
    name = StringField('Name', validators=[DataRequired(), Length(max=100)])
    specification = TextAreaField('Specification', validators=[Optional()])
    installed_date = DateField('Installed Date', validators=[Optional()])
    state = StringField('State', validators=[Optional()])


class UpdateAssetForm(FlaskForm):
    name = StringField('Name', validators=[Optional(), Length(max=100)])
    specification = TextAreaField('Specification', validators=[Optional()])
    installed_date = DateField('Installed Date', validators=[Optional()])
    state = StringField('State', validators=[Optional()])


class CategoryForm(FlaskForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=100)])
    prefix = StringField('Prefix', validators=[DataRequired(), Regexp(r'^[A-Za-z]{2}$',
                                                                      message='Prefix must be 2 letters')])


class AssignmentForm(FlaskForm):
    user_id = IntegerField('User', validators=[DataRequired()])
    asset_id = IntegerField('Asset', validators=[DataRequired()])
    assigned_date = DateField('Assigned Date', validators=[Optional()])
    note = TextAreaField('Note', validators=[Optional(), Length(max=500)])


class RespondAssignmentForm(FlaskForm):
    # JSON booleans arrive as real bools, not strings
    accepted = BooleanField('Accepted', false_values=(False, 'false', 'False', '0', ''))

    def validate_accepted(self, accepted):
        if not accepted.raw_data:
            raise ValidationError('This field is required.')


class UserForm(FlaskForm):
    first_name = StringField('First Name', validators=[DataRequired(), Length(max=100)])
    last_name = StringField('Last Name', validators=[DataRequired(), Length(max=100)])
    date_of_birth = DateField('Date of Birth', validators=[DataRequired()])
    gender = StringField('Gender', validators=[Optional(), AnyOf(GENDERS)])
    joined_date = DateField('Joined Date', validators=[DataRequired()])
    type = StringField('Type', validators=[DataRequired(), AnyOf(USER_TYPES)])

    def validate_joined_date(self, joined_date):
        if self.date_of_birth.data and joined_date.data and joined_date.data < self.date_of_birth.data:
            raise ValidationError('Joined date is not later than Date of Birth. Please select a different date')


class UpdateUserForm(FlaskForm):
    date_of_birth = DateField('Date of Birth', validators=[Optional()])
    gender = StringField('Gender', validators=[Optional(), AnyOf(GENDERS)])
    joined_date = DateField('Joined Date', validators=[Optional()])
    type = StringField('Type', validators=[Optional(), AnyOf(USER_TYPES)])
