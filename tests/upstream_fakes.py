"""Fake upstream services served through httpx.MockTransport."""

import json
from typing import Any

import httpx

ADS_URL = "http://ads.test/advertisements"
IMAGES_URL = "http://images.test/images"
VIDEOS_URL = "http://videos.test/videos"


def ad(container_id: int, ad_id: int, name: str = "Ad") -> dict[str, str]:
    return {
        "containerId": str(container_id),
        "id": str(ad_id),
        "name": name,
        "url": f"http://ads.test/{ad_id}.png",
    }


def image(container_id: int, image_id: int, name: str = "Image") -> dict[str, str]:
    return {
        "containerId": str(container_id),
        "id": str(image_id),
        "name": name,
        "url": f"http://images.test/{image_id}.png",
    }


def video(container_id: int, video_id: int, video_type: str = "CLIP") -> dict[str, str]:
    return {
        "containerId": str(container_id),
        "id": str(video_id),
        "description": f"Video {video_id}",
        "expirationDate": "",
        "playbackUrl": f"/path/to/{video_id}.m3u8",
        "title": f"Title {video_id}",
        "type": video_type,
    }


def asset(video_id: int, asset_id: int, asset_type: str = "AD") -> dict[str, str]:
    return {"assetId": str(asset_id), "assetType": asset_type, "videoId": str(video_id)}


class FakeUpstreams:
    """
    In-memory stand-in for the three upstream services.

    Filters on ``containerId``, ``type`` and ``assetType`` the way the real
    services do. ``fail`` forces a status code for every request whose path
    starts with the given prefix.
    """

    def __init__(self):
        self.ads: list[dict[str, str]] = []
        self.images: list[dict[str, str]] = []
        self.videos: list[dict[str, str]] = []
        self.assets: dict[int, list[dict[str, str]]] = {}
        self.failures: dict[str, int] = {}
        self.requests: list[httpx.Request] = []

    def fail(self, url_prefix: str, status_code: int) -> None:
        self.failures[url_prefix] = status_code

    def count(self, url_prefix: str) -> int:
        return sum(1 for r in self.requests if str(r.url).startswith(url_prefix))

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)

        for prefix, status_code in self.failures.items():
            if url.startswith(prefix):
                return httpx.Response(status_code, json={"message": "forced failure"})

        params = request.url.params
        host = request.url.host
        path = request.url.path

        if host == "ads.test":
            return self._json("advertisements", self._filter(self.ads, params))
        if host == "images.test":
            return self._json("images", self._filter(self.images, params))
        if host == "videos.test":
            parts = path.strip("/").split("/")
            if len(parts) == 1:
                return self._json("videos", self._filter(self.videos, params))
            video_id = int(parts[1])
            if len(parts) == 2:
                for record in self.videos:
                    if record["id"] == str(video_id):
                        return httpx.Response(200, json=record)
                return httpx.Response(404)
            refs = self.assets.get(video_id, [])
            if "assetType" in params:
                refs = [r for r in refs if r["assetType"] == params["assetType"]]
            return self._json("videoAssets", refs)

        return httpx.Response(404)

    @staticmethod
    def _filter(records: list[dict[str, str]], params: httpx.QueryParams) -> list[dict[str, str]]:
        if "containerId" in params:
            records = [r for r in records if r["containerId"] == params["containerId"]]
        if "type" in params:
            records = [r for r in records if r["type"] == params["type"]]
        return records

    @staticmethod
    def _json(envelope: str, records: list[Any]) -> httpx.Response:
        return httpx.Response(
            200,
            content=json.dumps({envelope: records}).encode(),
            headers={"content-type": "application/json"},
        )
