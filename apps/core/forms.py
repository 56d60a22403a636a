# apps/core/forms.py

from django import forms

from .models import User, Project, Task


class DefaultsOptionalMixin:
    """
    Fields with a model default may be omitted; the default is kept

    A field that is sent must still be valid, so ``{"status": ""}`` is
    rejected instead of storing an empty choice.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name, field in self.fields.items():
            omitted = field.widget.value_omitted_from_data(self.data, self.files, self.add_prefix(name))
            if omitted and self._meta.model._meta.get_field(name).has_default():
                field.required = False


class LoginForm(forms.Form):
    """Credentials for the JSON login endpoint"""

    username = forms.CharField(label='Username or email', max_length=150)
    password = forms.CharField(label='Password')


class UserProfileForm(forms.ModelForm):
    """Fields a user may change on their own profile"""

    class Meta:
        model = User
        fields = ['first_name', 'last_name', 'email', 'phone']

    def clean_email(self):
        email = self.cleaned_data.get('email', '').strip().lower()
        if email and User.objects.filter(email=email).exclude(pk=self.instance.pk).exists():
            raise forms.ValidationError('This email is already in use.')
        return email


class AdminUserForm(UserProfileForm):
    """Administrators may also change role and active flag"""

    class Meta(UserProfileForm.Meta):
        fields = UserProfileForm.Meta.fields + ['role', 'is_active']


class ProjectForm(DefaultsOptionalMixin, forms.ModelForm):
    """
    Project data sent by clients

    ``owner`` is not editable: it is set to the creator and never changes.
    """

    class Meta:
        model = Project
        fields = [
            'name', 'description', 'status', 'members',
            'start_date', 'end_date', 'budget', 'progress'
        ]

    def clean(self):
        cleaned_data = super().clean()
        start_date = cleaned_data.get('start_date')
        end_date = cleaned_data.get('end_date')

        if start_date and end_date and end_date < start_date:
            raise forms.ValidationError('End date must not be before start date.')

        return cleaned_data


class TaskForm(DefaultsOptionalMixin, forms.ModelForm):
    """
    Task data sent by clients

    ``created_by`` is not editable: it is set to the creator and never changes.
    """

    class Meta:
        model = Task
        fields = [
            'title', 'description', 'status', 'priority',
            'assigned_to', 'project', 'due_date', 'tags'
        ]

    def clean_tags(self):
        tags = self.cleaned_data.get('tags') or []
        if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
            raise forms.ValidationError('Tags must be a list of strings.')
        return [tag.strip() for tag in tags if tag.strip()]
