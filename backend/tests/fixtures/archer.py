from mongo_fixtures import create_object_id

archer = [
    {"_id": create_object_id("4eca80fae4af59f55d000020"), "name": "Sterling"},
    {"_id": create_object_id("4eca80fae4af59f55d000021"), "name": "Lana"},
    {"_id": create_object_id("4eca80fae4af59f55d000022"), "name": "Cheryl"},
]
