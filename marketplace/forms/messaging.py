from django import forms


class MessageForm(forms.Form):
    recipient = forms.IntegerField(widget=forms.HiddenInput)
    message = forms.CharField(widget=forms.Textarea(attrs={"class": "form-control", "rows": 2}))
