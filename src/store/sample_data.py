# fixed catalog shown while the API is unreachable (offline/demo mode)
from typing import List

from api.models import Product

_RAW_SAMPLE = [
    {
        "_id": "demo-001",
        "name": "AquaJet 100 Self-Priming Pump",
        "description": "Compact self-priming pump for domestic water supply.",
        "price": 189.99,
        "category": {"_id": "cat-self-priming", "name": "Self-priming"},
        "images": ["/images/aquajet-100.jpg"],
        "stock": 25,
    },
    {
        "_id": "demo-002",
        "name": "CentriMax 750 Centrifugal Pump",
        "description": "High-flow centrifugal pump for irrigation and transfer.",
        "price": 349.0,
        "category": {"_id": "cat-centrifugal", "name": "Centrifugal pumps"},
        "images": ["/images/centrimax-750.jpg"],
        "stock": 12,
    },
    {
        "_id": "demo-003",
        "name": "PoolPro Circulation Pump",
        "description": "Quiet circulation pump with pre-filter basket for pools.",
        "price": 279.5,
        "category": {"_id": "cat-pool", "name": "Swimming pool"},
        "images": ["/images/poolpro.jpg"],
        "stock": 8,
    },
    {
        "_id": "demo-004",
        "name": "SunFlow Solar Pump Kit",
        "description": "Solar powered borehole pump with MPPT controller.",
        "price": 899.0,
        "category": {"_id": "cat-solar", "name": "Solar pump"},
        "images": ["/images/sunflow.jpg"],
        "stock": 4,
    },
    {
        "_id": "demo-005",
        "name": "DeepWell 4in Submersible Pump",
        "description": "Automatic submersible pump with float switch.",
        "price": 459.0,
        "category": {"_id": "cat-submersible", "name": "Automatic submersible pump"},
        "images": ["/images/deepwell.jpg"],
        "stock": 10,
    },
    {
        "_id": "demo-006",
        "name": "SewMaster Sewage Pump",
        "description": "Submersible sewage pump with vortex impeller.",
        "price": 399.0,
        "category": {"_id": "cat-sewage", "name": "Submersible sewage pump"},
        "images": ["/images/sewmaster.jpg"],
        "stock": 6,
    },
    {
        "_id": "demo-007",
        "name": "SmartPress Inverter Pump",
        "description": "Inverter automatic pump keeping constant pressure.",
        "price": 649.0,
        "category": {"_id": "cat-inverter", "name": "Inverter automatic pump"},
        "images": ["/images/smartpress.jpg"],
        "stock": 0,
    },
    {
        "_id": "demo-008",
        "name": "Pressure Switch Kit",
        "description": "Peripheral pressure switch with gauge and fittings.",
        "price": 39.9,
        "category": {"_id": "cat-peripheral", "name": "Peripheral"},
        "images": [],
        "stock": 60,
    },
]

SAMPLE_PRODUCTS: List[Product] = [Product.from_json(p) for p in _RAW_SAMPLE]
