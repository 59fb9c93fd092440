from rest_framework import serializers

class LivenessVerifyInputSerializer(serializers.Serializer):
    bundle = serializers.FileField(required=False, allow_empty_file=True)
    image = serializers.FileField(required=False, allow_empty_file=True)
    auth_token = serializers.CharField(required=False, allow_blank=True)
    template_id = serializers.CharField(required=False, allow_blank=True)
    verification_id = serializers.CharField(required=False, allow_blank=True)
