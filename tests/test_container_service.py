import pytest

from container_gateway.models import (
    Advertisement,
    AssetReference,
    AssetType,
    Container,
    Video,
    VideoType,
)
from container_gateway.services.errors import (
    DecodeError,
    ResourceNotFoundError,
    UpstreamServerError,
)
from upstream_fakes import ADS_URL, IMAGES_URL, VIDEOS_URL, ad, asset, image, video


def seed_catalog(upstreams) -> None:
    upstreams.ads = [ad(1, 10), ad(2, 20), ad(1, 11), ad(9, 90)]
    upstreams.images = [image(1, 30), image(8, 80)]
    upstreams.videos = [
        video(2, 200, "MOVIE"),
        video(1, 100),
        video(1, 101, "EPISODE"),
        video(3, 300),
    ]
    upstreams.assets = {
        100: [asset(100, 10, "AD"), asset(100, 30, "IMAGE")],
        101: [asset(101, 11, "AD")],
        200: [asset(200, 20, "AD")],
        300: [],
    }


@pytest.mark.asyncio
async def test_end_to_end_single_container(service, upstreams):
    upstreams.ads = [{"containerId": "5", "id": "9", "name": "A", "url": "http://x"}]
    upstreams.images = []
    upstreams.videos = [
        {
            "containerId": "5",
            "id": "100",
            "description": "d",
            "expirationDate": "",
            "playbackUrl": "p",
            "title": "t",
            "type": "CLIP",
        }
    ]
    upstreams.assets = {100: []}

    result = await service.get_container(5)

    assert result.ok
    assert result.data == Container(
        id=5,
        title="container-5_ads_videos",
        ads=[Advertisement(id=9, name="A", url="http://x")],
        images=[],
        videos=[
            Video(
                id=100,
                assets=[],
                description="d",
                expiration_date="",
                playback_url="p",
                title="t",
                type=VideoType.CLIP,
            )
        ],
    )


@pytest.mark.asyncio
async def test_assemble_one_is_complete(service, upstreams):
    seed_catalog(upstreams)

    result = await service.assemble_one(1)

    container = result.data
    assert container.title == "container-1_ads_images_videos"
    assert [a.id for a in container.ads] == [10, 11]
    assert [i.id for i in container.images] == [30]
    assert [v.id for v in container.videos] == [100, 101]
    assert all(v.assets for v in container.videos)
    assert container.videos[0].assets == (
        AssetReference(asset_id=10, asset_type=AssetType.AD),
        AssetReference(asset_id=30, asset_type=AssetType.IMAGE),
    )


@pytest.mark.asyncio
async def test_assemble_one_filters_each_upstream_by_container(service, upstreams):
    seed_catalog(upstreams)

    await service.assemble_one(1)

    for prefix in (ADS_URL, IMAGES_URL):
        requests = [r for r in upstreams.requests if str(r.url).startswith(prefix)]
        assert [r.url.params["containerId"] for r in requests] == ["1"]
    assert upstreams.count(f"{VIDEOS_URL}?containerId=1") == 1
    assert upstreams.count(f"{VIDEOS_URL}/100/asset-references") == 1
    assert upstreams.count(f"{VIDEOS_URL}/101/asset-references") == 1


@pytest.mark.asyncio
async def test_empty_lists_are_not_failures(service, upstreams):
    result = await service.assemble_one(42)

    assert result.ok
    assert result.data == Container(id=42, title="container-42_videos")


@pytest.mark.asyncio
async def test_failed_upstream_fails_the_whole_assembly(service, upstreams):
    seed_catalog(upstreams)
    upstreams.fail(ADS_URL, 404)

    result = await service.get_container(1)

    assert isinstance(result.error, ResourceNotFoundError)
    assert 1 not in service.cache
    await service.close()


@pytest.mark.asyncio
async def test_failed_asset_lookup_fails_the_assembly(service, upstreams):
    seed_catalog(upstreams)
    upstreams.fail(f"{VIDEOS_URL}/101/asset-references", 500)

    result = await service.get_container(1)

    assert isinstance(result.error, UpstreamServerError)
    assert upstreams.count(f"{VIDEOS_URL}/101/asset-references") == 3
    assert len(service.cache) == 0
    await service.close()


@pytest.mark.asyncio
async def test_malformed_upstream_record_fails_the_assembly(service, upstreams):
    upstreams.videos = [{**video(1, 100), "containerId": "one"}]

    result = await service.assemble_all()

    assert isinstance(result.error, DecodeError)
    assert upstreams.count(VIDEOS_URL) == 1
    await service.close()


@pytest.mark.asyncio
async def test_repeat_lookup_is_served_from_cache(service, upstreams):
    seed_catalog(upstreams)

    first = await service.get_container(1)
    calls = len(upstreams.requests)
    second = await service.get_container(1)

    assert len(upstreams.requests) == calls
    assert first.data == second.data


@pytest.mark.asyncio
async def test_assemble_all_is_driven_by_videos(service, upstreams):
    seed_catalog(upstreams)

    result = await service.assemble_all()

    containers = result.data
    assert [c.id for c in containers] == [2, 1, 3]
    by_id = {c.id: c for c in containers}
    assert by_id[1].title == "container-1_ads_images_videos"
    assert [a.id for a in by_id[1].ads] == [10, 11]
    assert by_id[2].images == ()
    assert by_id[2].title == "container-2_ads_videos"
    assert by_id[3].ads == () and by_id[3].images == ()
    assert by_id[3].title == "container-3_videos"
    # containers 8 and 9 have no videos
    assert 8 not in by_id and 9 not in by_id


@pytest.mark.asyncio
async def test_assemble_all_uses_unfiltered_lists(service, upstreams):
    seed_catalog(upstreams)

    await service.assemble_all()

    list_requests = [
        r for r in upstreams.requests if "asset-references" not in r.url.path
    ]
    assert len(list_requests) == 3
    assert all(not r.url.params for r in list_requests)


@pytest.mark.asyncio
async def test_list_containers_primes_the_cache(service, upstreams):
    seed_catalog(upstreams)

    listed = await service.list_containers()
    calls = len(upstreams.requests)
    single = await service.get_container(2)

    assert len(upstreams.requests) == calls
    assert single.data == next(c for c in listed.data if c.id == 2)
    assert set(service.cache.keys()) == {1, 2, 3}


@pytest.mark.asyncio
async def test_list_containers_failure_leaves_cache_untouched(service, upstreams):
    seed_catalog(upstreams)
    upstreams.fail(IMAGES_URL, 503)

    result = await service.list_containers()

    assert not result.ok
    assert len(service.cache) == 0
    await service.close()


@pytest.mark.asyncio
async def test_field_projections(service, upstreams):
    seed_catalog(upstreams)

    ads = await service.list_advertisements_for_container(1)
    images = await service.list_images_for_container(1)
    videos = await service.list_videos_for_container(1)

    assert [a.id for a in ads.data] == [10, 11]
    assert [i.id for i in images.data] == [30]
    assert [v.id for v in videos.data] == [100, 101]
    assert upstreams.count(ADS_URL) == 1


@pytest.mark.asyncio
async def test_projection_copies_do_not_alter_the_cached_container(service, upstreams):
    seed_catalog(upstreams)

    ads = await service.list_advertisements_for_container(1)
    ads.data.clear()
    container = await service.get_container(1)

    assert [a.id for a in container.data.ads] == [10, 11]
    assert container.data.title == "container-1_ads_images_videos"
    assert upstreams.count(ADS_URL) == 1


@pytest.mark.asyncio
async def test_get_video_resolves_assets(service, upstreams):
    seed_catalog(upstreams)

    result = await service.get_video(200)

    assert result.data.type == VideoType.MOVIE
    assert result.data.assets == (AssetReference(asset_id=20, asset_type=AssetType.AD),)


@pytest.mark.asyncio
async def test_get_unknown_video_is_not_found(service, upstreams):
    result = await service.get_video(999)

    assert isinstance(result.error, ResourceNotFoundError)


@pytest.mark.asyncio
async def test_list_videos_by_type_groups_by_container(service, upstreams):
    seed_catalog(upstreams)

    result = await service.list_videos_by_type(VideoType.CLIP)

    assert {key: [v.id for v in videos] for key, videos in result.data.items()} == {
        1: [100],
        3: [300],
    }


@pytest.mark.asyncio
async def test_asset_references_by_type(service, upstreams):
    seed_catalog(upstreams)

    result = await service.videos.list_asset_references(100, AssetType.IMAGE)

    assert result.data == [AssetReference(asset_id=30, asset_type=AssetType.IMAGE)]


@pytest.mark.asyncio
async def test_videos_filtered_by_container_and_type(service, upstreams):
    seed_catalog(upstreams)

    result = await service.videos.list_by_container_and_type(1, VideoType.EPISODE)

    assert [dto.video_id() for dto in result.data] == [101]
    request = upstreams.requests[-1]
    assert request.url.query == b"containerId=1&type=EPISODE"
