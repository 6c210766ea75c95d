from django import forms

from ..models import Profile


class ProfileForm(forms.ModelForm):
    class Meta:
        model = Profile
        fields = ["full_name", "email", "phone", "location", "bio"]
        widgets = {
            "full_name": forms.TextInput(attrs={"class": "form-control"}),
            "email": forms.EmailInput(attrs={"class": "form-control"}),
            "phone": forms.TextInput(attrs={"class": "form-control"}),
            "location": forms.TextInput(attrs={"class": "form-control"}),
            "bio": forms.Textarea(attrs={"class": "form-control", "rows": 4}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name in ("full_name", "email", "phone", "location"):
            self.fields[name].required = True

    def clean_full_name(self):
        full_name = (self.cleaned_data.get("full_name") or "").strip()
        if len(full_name) < 2:
            raise forms.ValidationError("Name must be at least 2 characters.")
        return full_name

    def clean_phone(self):
        phone = (self.cleaned_data.get("phone") or "").strip()
        digits_only = "".join(ch for ch in phone if ch.isdigit())
        if len(digits_only) < 10:
            raise forms.ValidationError("Phone number must be at least 10 digits.")
        return phone

    def clean_location(self):
        location = (self.cleaned_data.get("location") or "").strip()
        if len(location) < 2:
            raise forms.ValidationError("Location must be at least 2 characters.")
        return location
