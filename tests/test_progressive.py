"""Tests for the progressive renderer.

This module tests the ProgressiveRenderer class including:
- Initialization and validation
- Progressive sample accumulation
- The pass generator, cancellation and resuming
- Sink and progress callbacks
- Reset functionality
- Image output

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

import numpy as np
import pytest


def _make_renderer(scene, camera, width=8, height=8, samples=3, **kwargs):
    from mirrorball.core.progressive import ProgressiveRenderer
    from mirrorball.core.settings import RenderSettings

    settings = RenderSettings(width=width, height=height, samples=samples, **kwargs)
    return ProgressiveRenderer(scene, camera, settings)


class TestRenderSettings:
    """Test RenderSettings validation."""

    def test_defaults(self):
        """Test the default bounce budget, jitter and gamma."""
        from mirrorball.core.settings import RenderSettings

        settings = RenderSettings(width=4, height=4)
        assert settings.samples == 200
        assert settings.max_bounces == 5
        assert settings.jitter is False
        assert settings.gamma == pytest.approx(2.2)

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"width": 0, "height": 4}, "Resolution"),
            ({"width": 4, "height": -1}, "Resolution"),
            ({"width": 4, "height": 4, "samples": 0}, "Sample budget"),
            ({"width": 4, "height": 4, "max_bounces": 0}, "Bounce budget"),
            ({"width": 4, "height": 4, "gamma": 0.0}, "Gamma"),
        ],
    )
    def test_rejects_invalid_settings(self, kwargs, message):
        """Test that invalid settings raise before any rendering."""
        from mirrorball.core.settings import RenderSettings

        with pytest.raises(ValueError, match=message):
            RenderSettings(**kwargs)


class TestProgressiveRendererInit:
    """Test ProgressiveRenderer initialization."""

    def test_init_state(self, red_sphere_scene):
        """Test dimensions and counters of a fresh renderer."""
        scene, camera = red_sphere_scene
        renderer = _make_renderer(scene, camera, width=12, height=9, samples=4)

        assert renderer.width == 12
        assert renderer.height == 9
        assert renderer.sample_count == 0
        assert renderer.sample_budget == 4
        assert not renderer.is_complete

    def test_rejects_wrong_argument_types(self, red_sphere_scene):
        """Test that the scene, camera and settings are type checked."""
        from mirrorball.core.progressive import ProgressiveRenderer
        from mirrorball.core.settings import RenderSettings

        scene, camera = red_sphere_scene
        settings = RenderSettings(width=4, height=4, samples=1)

        with pytest.raises(ValueError, match="Scene"):
            ProgressiveRenderer([], camera, settings)  # type: ignore[arg-type]
        with pytest.raises(ValueError, match="Camera"):
            ProgressiveRenderer(scene, None, settings)  # type: ignore[arg-type]
        with pytest.raises(ValueError, match="RenderSettings"):
            ProgressiveRenderer(scene, camera, {"width": 4})  # type: ignore[arg-type]

    def test_image_before_any_pass_raises(self, red_sphere_scene):
        """Test that requesting an image with no samples is an error."""
        scene, camera = red_sphere_scene
        renderer = _make_renderer(scene, camera)

        with pytest.raises(RuntimeError, match="No samples"):
            renderer.get_image_uint8()
        with pytest.raises(RuntimeError, match="No samples"):
            renderer.get_average()

    def test_repr(self, red_sphere_scene):
        """Test the string representation."""
        scene, camera = red_sphere_scene
        renderer = _make_renderer(scene, camera, width=8, height=4, samples=2)

        assert repr(renderer) == "ProgressiveRenderer(width=8, height=4, samples=0/2)"


class TestRenderProgressive:
    """Test the pass generator."""

    def test_yields_once_per_pass(self, red_sphere_scene):
        """Test that one PassResult is yielded per sample with 1-based indices."""
        scene, camera = red_sphere_scene
        renderer = _make_renderer(scene, camera, samples=4)

        results = list(renderer.render_progressive())

        assert [r.sample_index for r in results] == [1, 2, 3, 4]
        assert all(r.sample_budget == 4 for r in results)
        assert all(r.pixels.shape == (8, 8, 4) for r in results)
        assert all(r.pixels.dtype == np.uint8 for r in results)
        assert renderer.is_complete

    def test_generator_is_lazy(self, red_sphere_scene):
        """Test that creating the generator renders nothing."""
        scene, camera = red_sphere_scene
        renderer = _make_renderer(scene, camera, samples=4)

        generator = renderer.render_progressive()
        assert renderer.sample_count == 0

        next(generator)
        assert renderer.sample_count == 1
        generator.close()

    def test_abandoned_generator_keeps_partial_estimate(self, red_sphere_scene):
        """Test that stopping iteration leaves a usable partial image."""
        scene, camera = red_sphere_scene
        renderer = _make_renderer(scene, camera, samples=10)

        for result in renderer.render_progressive():
            if result.sample_index == 2:
                break

        assert renderer.sample_count == 2
        assert renderer.get_image_uint8().shape == (8, 8, 4)

    def test_cancel_stops_after_current_pass(self, red_sphere_scene):
        """Test that cancel() ends the generator after the running pass."""
        scene, camera = red_sphere_scene
        renderer = _make_renderer(scene, camera, samples=10)

        indices = []
        for result in renderer.render_progressive():
            indices.append(result.sample_index)
            if result.sample_index == 3:
                renderer.cancel()

        assert indices == [1, 2, 3]
        assert renderer.sample_count == 3

    def test_resume_continues_from_current_count(self, red_sphere_scene):
        """Test that a cancelled render can be resumed to the full budget."""
        scene, camera = red_sphere_scene
        renderer = _make_renderer(scene, camera, samples=5)

        for result in renderer.render_progressive():
            if result.sample_index == 2:
                renderer.cancel()

        resumed = [r.sample_index for r in renderer.render_progressive(resume=True)]

        assert resumed == [3, 4, 5]
        assert renderer.sample_count == 5

    def test_new_render_starts_fresh(self, red_sphere_scene):
        """Test that a non-resumed render resets the accumulation."""
        scene, camera = red_sphere_scene
        renderer = _make_renderer(scene, camera, samples=3)

        list(renderer.render_progressive())
        indices = [r.sample_index for r in renderer.render_progressive()]

        assert indices == [1, 2, 3]


class TestRender:
    """Test render() with sink and callback."""

    def test_sink_receives_every_pass_and_final_image(self, red_sphere_scene):
        """Test that the sink gets one image per pass plus the final flush."""
        scene, camera = red_sphere_scene
        renderer = _make_renderer(scene, camera, samples=3)

        received = []
        final = renderer.render(sink=received.append)

        assert len(received) == 4
        assert final is not None
        assert np.array_equal(received[-1], final)
        assert np.array_equal(received[-2], final)

    def test_callback_receives_progress(self, red_sphere_scene):
        """Test that the callback receives (sample_index, sample_budget)."""
        scene, camera = red_sphere_scene
        renderer = _make_renderer(scene, camera, samples=3)

        progress = []
        renderer.render(callback=lambda current, total: progress.append((current, total)))

        assert progress == [(1, 3), (2, 3), (3, 3)]

    def test_cancel_from_callback(self, red_sphere_scene):
        """Test that a callback can stop the render early."""
        scene, camera = red_sphere_scene
        renderer = _make_renderer(scene, camera, samples=10)

        def stop_at_two(current: int, total: int) -> None:
            if current == 2:
                renderer.cancel()

        image = renderer.render(callback=stop_at_two)

        assert renderer.sample_count == 2
        assert image is not None


class TestProgressiveRendererReset:
    """Test reset functionality."""

    def test_reset_clears_samples(self, red_sphere_scene):
        """Test that reset clears the sample count and running sum."""
        scene, camera = red_sphere_scene
        renderer = _make_renderer(scene, camera, samples=2)

        renderer.render()
        assert renderer.sample_count == 2

        renderer.reset()
        assert renderer.sample_count == 0
        with pytest.raises(RuntimeError):
            renderer.get_average()

    def test_render_pass_beyond_budget(self, red_sphere_scene):
        """Test that render_pass() keeps accumulating past the budget."""
        scene, camera = red_sphere_scene
        renderer = _make_renderer(scene, camera, samples=1)

        renderer.render_pass()
        assert renderer.render_pass() == 2


class TestAveraging:
    """Test the averaged estimate."""

    def test_deterministic_passes_average_to_single_frame(self, red_sphere_scene):
        """Test that N identical passes average to the single-pass frame."""
        from mirrorball.core.integrator import render_frame

        scene, camera = red_sphere_scene
        renderer = _make_renderer(scene, camera, width=16, height=16, samples=6)
        renderer.render()

        single = render_frame(scene, camera, renderer.settings)
        assert np.array_equal(renderer.get_average(), single)

    def test_mirror_showcase_passes_average_exactly(self):
        """Test exact averaging of deterministic multi-bounce passes."""
        from dataclasses import replace

        from mirrorball.core.integrator import render_frame
        from mirrorball.scene.model import Scene
        from mirrorball.scene.showcase import create_showcase_scene

        showcase, camera = create_showcase_scene()
        scene = Scene(objects=tuple(replace(obj, roughness=0.0) for obj in showcase.objects))
        renderer = _make_renderer(scene, camera, width=64, height=64, samples=7)
        renderer.render()

        single = render_frame(scene, camera, renderer.settings)
        assert np.array_equal(renderer.get_average(), single)

    def test_empty_scene_gives_black_image(self):
        """Test that an empty scene renders black RGB with opaque alpha."""
        from mirrorball.scene.model import Camera, Scene

        camera = Camera(position=(0, 0, 5), width=2.0, height=2.0)
        renderer = _make_renderer(Scene(), camera, samples=2)
        image = renderer.render()

        assert image is not None
        assert np.all(renderer.get_average()[..., :3] == 0.0)
        assert np.all(image[..., :3] == 0)
        assert np.all(image[..., 3] == 255)

    def test_jittered_render_stays_finite(self, red_sphere_scene):
        """Test that jittered rough renders produce finite averages."""
        from mirrorball.scene.model import Scene, SphereObject

        _, camera = red_sphere_scene
        scene = Scene(objects=(SphereObject((0, 0, 0), 1.0, (0, 0, 1), roughness=0.7),))
        renderer = _make_renderer(scene, camera, samples=4, jitter=True)
        renderer.render()

        average = renderer.get_average()
        assert np.all(np.isfinite(average))
        assert average[..., 2].max() > 0.0


class TestSaveImage:
    """Test saving through the renderer."""

    def test_save_image_writes_png(self, red_sphere_scene, tmp_path):
        """Test that save_image() writes a readable RGBA PNG."""
        from PIL import Image as PILImage

        scene, camera = red_sphere_scene
        renderer = _make_renderer(scene, camera, width=10, height=6, samples=1)
        renderer.render()

        path = tmp_path / "render.png"
        renderer.save_image(path)

        with PILImage.open(path) as img:
            assert img.size == (10, 6)
            assert img.mode == "RGBA"
