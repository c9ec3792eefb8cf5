from bzeagg.registry import DENOM_BZE, DENOM_UBZE, Asset, AssetDenom, AssetList

BZE_ASSET = {
    "denom_units": [
        {"denom": "ubze", "exponent": 0},
        {"denom": "bze", "exponent": 6, "aliases": ["beezee"]},
    ],
    "base": "ubze",
    "name": "BeeZee",
    "display": "bze",
    "symbol": "BZE",
}


def test_display_denom_unit_found():
    asset = Asset.from_dict(BZE_ASSET)
    display = asset.display_denom_unit()
    assert display.denom == "bze"
    assert display.exponent == 6
    assert display.aliases == ["beezee"]


def test_display_denom_unit_missing():
    asset = Asset.from_dict({**BZE_ASSET, "display": "nothing"})
    assert asset.display_denom_unit() is None


def test_is_bze():
    assert AssetDenom(denom=DENOM_BZE).is_bze()
    assert AssetDenom(denom=DENOM_UBZE).is_bze()
    assert not AssetDenom(denom="uvdl").is_bze()


def test_asset_round_trip():
    asset = Asset.from_dict(BZE_ASSET)
    assert Asset.from_dict(asset.to_dict()) == asset
    assert asset.to_dict() == BZE_ASSET


def test_empty_aliases_omitted():
    assert "aliases" not in AssetDenom(denom="ubze", exponent=0).to_dict()


def test_asset_list():
    lst = AssetList.from_dict({"chain_name": "beezee", "assets": [BZE_ASSET]})
    assert lst.chain_name == "beezee"
    assert [a.base for a in lst.assets] == ["ubze"]