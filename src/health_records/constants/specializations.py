# ============================================================================
# src/health_records/constants/specializations.py
# ============================================================================
"""
Medical specializations used for doctor matching.

Order matters: partial matching walks this list front to back, so the
default specialization is last.
"""

SPECIALIZATIONS = [
    "Cardiologist",
    "Dermatologist",
    "Orthopedic",
    "Neurologist",
    "Gastroenterologist",
    "Pulmonologist",
    "Endocrinologist",
    "Ophthalmologist",
    "ENT Specialist",
    "General Physician",
]

GENERAL_PHYSICIAN = "General Physician"

SPECIALIZATION_DESCRIPTIONS = {
    "Cardiologist": "Heart disease, chest pain, high blood pressure, cardiovascular issues, cholesterol problems, heart attacks, arrhythmia",
    "Dermatologist": "Skin rashes, acne, eczema, psoriasis, skin cancer, moles, skin infections",
    "Orthopedic": "Bone fractures, joint pain, arthritis, back pain, spine issues, sports injuries, muscle problems",
    "Neurologist": "Headaches, migraines, seizures, stroke, Parkinson's, Alzheimer's, nerve pain, brain disorders",
    "Gastroenterologist": "Stomach pain, digestive issues, liver problems, hepatitis, IBS, ulcers, acid reflux",
    "Pulmonologist": "Breathing problems, asthma, COPD, pneumonia, lung infections, chronic cough",
    "Endocrinologist": "Diabetes, thyroid problems, hormonal imbalances, metabolism issues, high blood sugar",
    "Ophthalmologist": "Eye problems, vision loss, cataracts, glaucoma, eye infections",
    "ENT Specialist": "Ear infections, hearing loss, sinus problems, throat issues, tonsillitis",
    "General Physician": "General checkup, minor illnesses, unclear symptoms, routine care",
}

# Finding -> specialist hints given to the model
DETECTION_RULES = [
    ("Diabetes/high blood sugar/HbA1c/insulin", "Endocrinologist"),
    ("Heart disease/high BP/ECG abnormalities/cholesterol", "Cardiologist"),
    ("Bone fractures/joint problems/arthritis/X-ray findings", "Orthopedic"),
    ("Lung issues/breathing problems/chest X-ray", "Pulmonologist"),
    ("Liver/stomach/digestive problems/endoscopy", "Gastroenterologist"),
    ("Skin conditions/dermatology reports", "Dermatologist"),
    ("Brain/neurological issues/CT scan/MRI findings", "Neurologist"),
    ("Eye problems/vision tests/ophthalmology", "Ophthalmologist"),
    ("Ear/nose/throat problems/ENT reports", "ENT Specialist"),
]
