from __future__ import annotations

from typing import Dict, List


class SearchTool:
    """Static destination catalog the offline backend prices trips from."""

    def __init__(self) -> None:
        self.catalog: Dict[str, dict] = {
            "Lisbon": {
                "airport": "LIS",
                "flight": {"airline": "TAP Air Portugal", "code": "TP", "price": 620.0, "duration_hours": 11},
                "hotel": {
                    "name": "Lisbon Central",
                    "rating": 4.3,
                    "address": "Rua Augusta 120, Lisbon",
                    "price_per_night": 160.0,
                },
                "highlights": ["Alfama walking tour", "Tram 28", "LX Factory evening"],
                "tags": ["food", "history", "beaches"],
                "activity": "Moderate",
            },
            "Barcelona": {
                "airport": "BCN",
                "flight": {"airline": "Iberia", "code": "IB", "price": 680.0, "duration_hours": 12},
                "hotel": {
                    "name": "Hotel Gotico Bay",
                    "rating": 4.1,
                    "address": "Carrer de Ferran 34, Barcelona",
                    "price_per_night": 175.0,
                },
                "highlights": ["Sagrada Familia", "Tapas in El Born", "Barceloneta beach"],
                "tags": ["food", "architecture", "beaches", "nightlife"],
                "activity": "Active",
            },
            "Reykjavik": {
                "airport": "KEF",
                "flight": {"airline": "Icelandair", "code": "FI", "price": 540.0, "duration_hours": 8},
                "hotel": {
                    "name": "Harbour Lights Inn",
                    "rating": 4.0,
                    "address": "Myrargata 2, Reykjavik",
                    "price_per_night": 210.0,
                },
                "highlights": ["Golden Circle drive", "Blue Lagoon", "Northern lights tour"],
                "tags": ["hiking", "nature", "photography"],
                "activity": "Active",
            },
            "Amsterdam": {
                "airport": "AMS",
                "flight": {"airline": "KLM", "code": "KL", "price": 710.0, "duration_hours": 10},
                "hotel": {
                    "name": "Canal House Suites",
                    "rating": 4.4,
                    "address": "Keizersgracht 148, Amsterdam",
                    "price_per_night": 190.0,
                },
                "highlights": ["Rijksmuseum", "Canal cruise", "Vondelpark cycling"],
                "tags": ["museums", "cycling", "art"],
                "activity": "Moderate",
            },
            "Rome": {
                "airport": "FCO",
                "flight": {"airline": "ITA Airways", "code": "AZ", "price": 740.0, "duration_hours": 13},
                "hotel": {
                    "name": "Albergo Trastevere",
                    "rating": 4.2,
                    "address": "Via della Lungaretta 80, Rome",
                    "price_per_night": 150.0,
                },
                "highlights": ["Colosseum at dusk", "Vatican Museums", "Trastevere food crawl"],
                "tags": ["history", "food", "museums"],
                "activity": "Moderate",
            },
            "Bali": {
                "airport": "DPS",
                "flight": {"airline": "Singapore Airlines", "code": "SQ", "price": 900.0, "duration_hours": 20},
                "hotel": {
                    "name": "Ubud Retreat",
                    "rating": 4.6,
                    "address": "Jalan Raya Ubud 9, Bali",
                    "price_per_night": 120.0,
                },
                "highlights": ["Rice terrace sunrise", "Balinese cooking class", "Spa afternoon"],
                "tags": ["wellness", "hiking", "beaches", "food"],
                "activity": "Relaxed",
            },
            "Cancun": {
                "airport": "CUN",
                "flight": {"airline": "Aeromexico", "code": "AM", "price": 430.0, "duration_hours": 6},
                "hotel": {
                    "name": "Playa Azul Resort",
                    "rating": 4.0,
                    "address": "Blvd. Kukulcan km 9, Cancun",
                    "price_per_night": 140.0,
                },
                "highlights": ["Beach days", "Cenote swim", "Chichen Itza day trip"],
                "tags": ["beaches", "history", "snorkeling"],
                "activity": "Relaxed",
            },
        }

    def lookup_destination(self, destination: str) -> dict:
        return self.catalog[destination]

    def destinations(self) -> List[str]:
        return list(self.catalog.keys())
