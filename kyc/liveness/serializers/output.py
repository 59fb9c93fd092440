from rest_framework import serializers

class LivenessVerifyOutputSerializer(serializers.Serializer):
    iad_result = serializers.ChoiceField(choices=["Success", "Rejected"])
    is_live = serializers.BooleanField()
    probability = serializers.FloatField()
    probability_percent = serializers.IntegerField()
    threshold = serializers.FloatField(allow_null=True)
