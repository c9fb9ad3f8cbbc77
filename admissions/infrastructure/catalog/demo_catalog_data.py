from __future__ import annotations

from typing import Any

# Small catalog for local runs. Exercises every skip policy:
# - Ireland has a single university, so Institution is skipped
# - Trinity only offers Master, so Level is skipped
# - Business at UCL Bachelor has no specializations, so Specialization is skipped
# - Data Science at Trinity has exactly one program, so Program auto-resolves
DEMO_CATALOG: dict[str, Any] = {
    "countries": [
        {
            "id": "uk",
            "name": "United Kingdom",
            "website": "uk",
            "universities": [
                {
                    "id": "ucl",
                    "name": "University College London",
                    "levels": {
                        "Bachelor": {
                            "categories": [
                                {
                                    "id": "eng",
                                    "category_name": "Engineering",
                                    "specializations": [
                                        {
                                            "id": "civil",
                                            "specialization_name": "Civil Engineering",
                                            "programs": [
                                                {
                                                    "id": "ucl-beng-civil",
                                                    "course_name": "BEng Civil Engineering",
                                                    "duration": "3 years",
                                                    "tuition_fee": "GBP 39,000",
                                                    "study_mode": "Full-time",
                                                    "intake": "September",
                                                },
                                                {
                                                    "id": "ucl-meng-civil",
                                                    "course_name": "MEng Civil Engineering",
                                                    "duration": "4 years",
                                                    "tuition_fee": "GBP 39,000",
                                                    "study_mode": "Full-time",
                                                    "intake": "September",
                                                },
                                            ],
                                        },
                                        {
                                            "id": "mech",
                                            "specialization_name": "Mechanical Engineering",
                                            "programs": [
                                                {
                                                    "id": "ucl-beng-mech",
                                                    "course_name": "BEng Mechanical Engineering",
                                                    "duration": "3 years",
                                                    "study_mode": "Full-time",
                                                    "intake": "September",
                                                },
                                            ],
                                        },
                                    ],
                                },
                                {
                                    "id": "bus",
                                    "category_name": "Business",
                                    "specializations": [],
                                    "programs": [
                                        {
                                            "id": "ucl-bsc-mgmt",
                                            "course_name": "BSc Management Science",
                                            "duration": "3 years",
                                            "study_mode": "Full-time",
                                            "intake": "September",
                                        },
                                        {
                                            "id": "ucl-bsc-econ",
                                            "course_name": "BSc Economics",
                                            "duration": "3 years",
                                            "study_mode": "Full-time",
                                            "intake": "September,January",
                                        },
                                    ],
                                },
                            ],
                        },
                        "Master": {
                            "categories": [
                                {
                                    "id": "cs",
                                    "category_name": "Computer Science",
                                    "specializations": [],
                                    "programs": [
                                        {
                                            "id": "ucl-msc-ml",
                                            "course_name": "MSc Machine Learning",
                                            "duration": "1 year",
                                            "study_mode": "Full-time",
                                            "intake": "September",
                                        },
                                    ],
                                },
                            ],
                        },
                    },
                },
                {
                    "id": "kcl",
                    "name": "King's College London",
                    "levels": {
                        "Bachelor": {
                            "categories": [
                                {
                                    "id": "law",
                                    "category_name": "Law",
                                    "specializations": [],
                                    "programs": [
                                        {
                                            "id": "kcl-llb",
                                            "course_name": "LLB Law",
                                            "duration": "3 years",
                                            "study_mode": "Full-time",
                                            "intake": "September",
                                        },
                                    ],
                                },
                            ],
                        },
                    },
                },
            ],
        },
        {
            "id": "ie",
            "name": "Ireland",
            "website": "ie",
            "universities": [
                {
                    "id": "tcd",
                    "name": "Trinity College Dublin",
                    "levels": {
                        "Master": {
                            "categories": [
                                {
                                    "id": "ds",
                                    "category_name": "Data Science",
                                    "specializations": [],
                                    "programs": [
                                        {
                                            "id": "tcd-msc-ds",
                                            "course_name": "MSc Data Science",
                                            "duration": "1 year",
                                            "tuition_fee": "EUR 21,000",
                                            "study_mode": "Full-time",
                                            "intake": "September",
                                        },
                                    ],
                                },
                                {
                                    "id": "fin",
                                    "category_name": "Finance",
                                    "specializations": [
                                        {
                                            "id": "quant",
                                            "specialization_name": "Quantitative Finance",
                                            "programs": [
                                                {
                                                    "id": "tcd-msc-qf",
                                                    "course_name": "MSc Quantitative Finance",
                                                    "duration": "1 year",
                                                    "study_mode": "Full-time",
                                                    "intake": "September",
                                                },
                                            ],
                                        },
                                    ],
                                },
                            ],
                        },
                    },
                },
            ],
        },
    ],
}
