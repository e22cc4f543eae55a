"""Fixed value sets shared by the model, the API serializers and the flows.

Kept free of Django imports so the flows can validate form input
without a configured project.
"""

GENDERS = ['Male', 'Female', 'Other']

BLOOD_GROUPS = ['A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-']

AGE_MIN = 1
AGE_MAX = 120

NAME_MIN_LENGTH = 2
