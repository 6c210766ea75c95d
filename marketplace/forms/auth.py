from django import forms

from ..models import Profile, User


class RegisterForm(forms.ModelForm):
    full_name = forms.CharField(label="Full name", max_length=255)
    phone = forms.CharField(label="Phone", max_length=20, required=False)
    password1 = forms.CharField(label="Password", widget=forms.PasswordInput)
    password2 = forms.CharField(label="Confirm Password", widget=forms.PasswordInput)

    class Meta:
        model = User
        fields = ["username", "email"]

    def clean(self):
        cleaned_data = super().clean()
        password1 = cleaned_data.get("password1")
        password2 = cleaned_data.get("password2")
        if password1 and password2 and password1 != password2:
            self.add_error("password2", "Passwords do not match.")
        return cleaned_data

    def clean_email(self):
        email = (self.cleaned_data.get("email") or "").strip()
        if not email:
            raise forms.ValidationError("Email is required.")
        if User.objects.filter(email__iexact=email).exists():
            raise forms.ValidationError("An account with this email already exists.")
        return email

    def clean_phone(self):
        phone = (self.cleaned_data.get("phone") or "").strip()
        if phone:
            digits_only = "".join(ch for ch in phone if ch.isdigit())
            if len(digits_only) < 10:
                raise forms.ValidationError("Phone number must be at least 10 digits.")
        return phone

    def save(self, commit=True):
        user = super().save(commit=False)
        user.set_password(self.cleaned_data["password1"])
        if commit:
            user.save()
            Profile.objects.create(
                user=user,
                full_name=self.cleaned_data["full_name"].strip(),
                email=user.email,
                phone=self.cleaned_data.get("phone") or "",
            )
        return user
