from __future__ import annotations

from ..models.dataset_kind import DatasetKind

"""Bundled sample datasets, last tier of the read chain.

Kept in wire form so they go through the same deserialization as stored
documents.
"""

__all__ = [
    "SAMPLE_DATA",
]

_TEC = [
    {
        "sh10Code": "0402211000", "designation": "Lait en poudre, en emballages d'au moins 25 kg",
        "us": "KG", "dd": 5.0, "rsta": 0.0, "pcs": 0.8, "pua": 0.5, "pcc": 0.5, "rrr": 0.0, "rcp": 0.0,
        "cumulSansTVA": 6.8, "cumulAvecTVA": 24.8, "tva": 18.0, "sh6Code": "040221",
    },
    {
        "sh10Code": "1006300000", "designation": "Riz semi-blanchi ou blanchi",
        "us": "KG", "dd": 10.0, "rsta": 0.0, "pcs": 0.8, "pua": 0.5, "pcc": 0.5, "rrr": 0.0, "rcp": 0.0,
        "cumulSansTVA": 11.8, "cumulAvecTVA": 11.8, "tva": 0.0, "sh6Code": "100630",
    },
    {
        "sh10Code": "8471300000", "designation": "Machines automatiques de traitement de l'information portatives",
        "us": "U", "dd": 5.0, "rsta": 0.0, "pcs": 0.8, "pua": 0.5, "pcc": 0.5, "rrr": 0.0, "rcp": 0.0,
        "cumulSansTVA": 6.8, "cumulAvecTVA": 24.8, "tva": 18.0, "sh6Code": "847130",
    },
    {
        "sh10Code": "8517130000", "designation": "Téléphones intelligents",
        "us": "U", "dd": 20.0, "rsta": 0.0, "pcs": 0.8, "pua": 0.5, "pcc": 0.5, "rrr": 0.0, "rcp": 0.0,
        "cumulSansTVA": 21.8, "cumulAvecTVA": 39.8, "tva": 18.0, "sh6Code": "851713",
    },
    {
        "sh10Code": "8703230000", "designation": "Véhicules de tourisme, cylindrée excédant 1500 cm3 mais n'excédant pas 3000 cm3",
        "us": "U", "dd": 20.0, "rsta": 0.0, "pcs": 0.8, "pua": 0.5, "pcc": 0.5, "rrr": 0.0, "rcp": 0.0,
        "cumulSansTVA": 21.8, "cumulAvecTVA": 39.8, "tva": 18.0, "sh6Code": "870323",
    },
]

_VOC = [
    {"codeSH": "1901901000", "designation": "Préparations à base de lait, matières grasses inférieures ou égales à 1,5%",
     "observation": "Produit alimentaire de base", "exempte": True},
    {"codeSH": "1901902000", "designation": "Préparations à base de lait, matières grasses supérieures à 1,5%",
     "observation": "Produit alimentaire transformé", "exempte": True},
    {"codeSH": "2517200000", "designation": "Macadam de laitier, de scories ou de déchets industriels similaires",
     "observation": "Matériau de construction", "exempte": False},
    {"codeSH": "6806100000", "designation": "Laines de laitier, de scories, de roche ou de verre",
     "observation": "Isolant thermique", "exempte": False},
    {"codeSH": "8471300000", "designation": "Ordinateurs portables d'un poids n'excédant pas 10 kg",
     "observation": "Équipement informatique", "exempte": False},
    {"codeSH": "8517120000", "designation": "Téléphones mobiles, autres que les téléphones intelligents",
     "observation": "Télécommunication", "exempte": False},
    {"codeSH": "8517130000", "designation": "Téléphones intelligents",
     "observation": "Télécommunication avancée", "exempte": False},
    {"codeSH": "8703230000", "designation": "Véhicules automobiles pour le transport de personnes",
     "observation": "Véhicule", "exempte": False},
]

_TARIFPORT = [
    {"libelle_produit": libelle, "chapitre": f"{n:02d}", "tp": tp, "coderedevance": code}
    for n, (libelle, tp, code) in enumerate(
        [
            ("Droits et Taxes", "DT", "DT001"),
            ("Divers débours", "DD", "DD001"),
            ("Frais établissement FDI", "FDI", "FDI001"),
            ("Frais RFCV", "RFCV", "RFCV001"),
            ("Redevance portuaire", "RP", "RP001"),
            ("Redevance Municipale", "RM", "RM001"),
            ("Acconage Import TEU", "AIT", "AIT001"),
            ("Livraison_TEU", "LTEU", "LTEU001"),
            ("Relevage_TEU", "RTEU", "RTEU001"),
            ("Echange BL", "EBL", "EBL001"),
            ("Nettoyage_TC_TEU", "NTC", "NTC001"),
            ("Taxe ISPS", "ISPS", "ISPS001"),
            ("Scanner", "SCAN", "SCAN001"),
            ("Timbre sur BL", "TSBL", "TSBL001"),
            ("Conteneur_Service_Charge_CSC", "CSC", "CSC001"),
            ("Ouverture dossier", "OD", "OD001"),
            ("Commission Transit", "CT", "CT001"),
            ("Taxe Sydam", "SYDAM", "SYDAM001"),
        ],
        start=1,
    )
]

SAMPLE_DATA: dict[DatasetKind, list[dict]] = {
    DatasetKind.TEC: _TEC,
    DatasetKind.VOC: _VOC,
    DatasetKind.TARIFPORT: _TARIFPORT,
}
