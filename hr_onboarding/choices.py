from typing import Dict, List

genders: Dict[str, str] = {
    'm': "Male",
    'f': "Female",
    'o': "Other",
}

marital_statuses: Dict[str, str] = {
    'single': "Single",
    'married': "Married",
    'divorced': "Divorced",
    'widowed': "Widowed",
}

blood_groups: List[str] = [
    "A+",
    "A-",
    "B+",
    "B-",
    "AB+",
    "AB-",
    "O+",
    "O-",
]

employment_statuses: Dict[str, str] = {
    'intern': "Intern",
    'probation': "Probation",
    'confirmed': "Confirmed",
    'resigned': "Resigned",
    'terminated': "Terminated",
}

employment_types: Dict[str, str] = {
    'full_time': "Full-time",
    'part_time': "Part-time",
    'contract': "Contract",
}

contact_types: Dict[str, str] = {
    'phone': "Phone",
    'email': "Email",
}

DEFAULT_COUNTRY: str = "India"

indian_states: List[str] = [
    "Andhra Pradesh",
    "Arunachal Pradesh",
    "Assam",
    "Bihar",
    "Chhattisgarh",
    "Goa",
    "Gujarat",
    "Haryana",
    "Himachal Pradesh",
    "Jharkhand",
    "Karnataka",
    "Kerala",
    "Madhya Pradesh",
    "Maharashtra",
    "Manipur",
    "Meghalaya",
    "Mizoram",
    "Nagaland",
    "Odisha",
    "Punjab",
    "Rajasthan",
    "Sikkim",
    "Tamil Nadu",
    "Telangana",
    "Tripura",
    "Uttar Pradesh",
    "Uttarakhand",
    "West Bengal",
    "Andaman and Nicobar Islands",
    "Chandigarh",
    "Dadra and Nagar Haveli and Daman and Diu",
    "Delhi",
    "Jammu and Kashmir",
    "Ladakh",
    "Lakshadweep",
    "Puducherry",
]
