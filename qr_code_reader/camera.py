# SPDX-License-Identifier: GPL-2.0
# Copyright (C) 2025 Bardia Moshiri <bardia@furilabs.com>

import logging
from typing import Callable, List, Optional

import gi
import numpy as np

gi.require_version('Gst', '1.0')
gi.require_version('GstVideo', '1.0')
from gi.repository import Gst, GstVideo

from .config import ANALYSIS_SIZES, PREVIEW_SIZES
from .errors import BindError
from .models import CameraConfiguration, CameraHandle, Frame, LensFacing
from .rotation import relative_rotation

logger = logging.getLogger(__name__)

Gst.init(None)

_VIDEOFLIP_METHODS = {
    0: 'none',
    90: 'clockwise',
    180: 'rotate-180',
    270: 'counterclockwise',
}

class CameraDevice:
    def __init__(self, index: int, name: str, object_id: str,
                 lens_facing: LensFacing = LensFacing.FRONT, sensor_rotation: int = 0):
        self.index = index
        self.name = name
        self.object_id = object_id
        self.lens_facing = lens_facing
        self.sensor_rotation = sensor_rotation

    @property
    def path(self) -> str:
        return f"pipewire:{self.object_id}"

    def __str__(self):
        return f"{self.name} ({self.path})"

def lens_facing_from_location(location: Optional[str]) -> LensFacing:
    # Webcams report "external" or nothing at all; they face the user
    if location == 'back':
        return LensFacing.BACK
    return LensFacing.FRONT

class GstFrame(Frame):
    """Analysis frame backed by a mapped GStreamer buffer.

    The pixels are a view into the mapped memory, valid until release().
    """

    def __init__(self, sample: Gst.Sample, rotation_degrees: int):
        buffer = sample.get_buffer()
        info = GstVideo.VideoInfo.new_from_caps(sample.get_caps())

        success, mapinfo = buffer.map(Gst.MapFlags.READ)
        if not success:
            raise RuntimeError("Failed to map analysis buffer")

        width, height, stride = info.width, info.height, info.stride[0]
        try:
            rows = np.frombuffer(mapinfo.data, dtype=np.uint8)[:height * stride].reshape((height, stride))
            pixels = rows[:, :width * 3].reshape((height, width, 3))
        except Exception:
            buffer.unmap(mapinfo)
            raise

        super().__init__(pixels, rotation_degrees)
        self.sample = sample
        self.buffer = buffer
        self.mapinfo = mapinfo

    def _on_release(self):
        self.pixels = None
        self.buffer.unmap(self.mapinfo)
        self.mapinfo = None
        self.buffer = None
        self.sample = None

class GstCameraProvider:
    """Capture provider built on a single PipeWire fed GStreamer pipeline.

    One tee splits the source into the preview branch, rendered by
    gtk4paintablesink, and the analysis branch, whose leaky queue and
    dropping appsink keep only the newest frame.
    """

    def __init__(self, pipewire_fd: Optional[int] = None):
        self.pipewire_fd = pipewire_fd
        self.cameras: List[CameraDevice] = []
        self.pipeline = None
        self.appsink = None
        self.viewfinder_sink = None
        self.frame_callback: Optional[Callable[[Frame], None]] = None
        self.frame_rotation = 0
        self.discover_cameras()

    def discover_cameras(self) -> List[CameraDevice]:
        self.cameras = []

        monitor = Gst.DeviceMonitor()
        monitor.add_filter("Video/Source", None)

        if not monitor.start():
            logger.error("Failed to start GStreamer device monitor")
            return self.cameras

        try:
            for device in monitor.get_devices():
                camera = self._camera_from_device(device, len(self.cameras))
                if camera:
                    self.cameras.append(camera)
                    logger.info(f"Found camera: {camera.name} - Object ID: {camera.object_id} "
                                f"({camera.lens_facing.value}, sensor rotation {camera.sensor_rotation})")
        finally:
            monitor.stop()

        logger.info(f"Discovered {len(self.cameras)} camera devices")
        return self.cameras

    def _camera_from_device(self, device, index: int) -> Optional[CameraDevice]:
        device_name = device.get_display_name()
        caps = device.get_caps()

        has_video_source = any(
            caps.get_structure(i).get_name().startswith("video/")
            for i in range(caps.get_size())
        )
        if not has_video_source:
            return None

        props = device.get_properties()
        if props is None:
            logger.debug(f"No properties for device: {device_name}")
            return None

        success, object_serial = props.get_int("object.serial")
        if not success:
            logger.debug(f"No object ID found for device: {device_name}")
            return None

        location = props.get_string("api.libcamera.location")
        sensor_rotation = 0
        rotation_value = props.get_string("api.libcamera.rotation")
        if rotation_value:
            try:
                sensor_rotation = int(rotation_value)
            except ValueError:
                logger.warning(f"Ignoring sensor rotation {rotation_value!r} of {device_name}")

        return CameraDevice(index, device_name, str(object_serial),
                            lens_facing_from_location(location), sensor_rotation)

    def has_camera(self, lens_facing: LensFacing) -> bool:
        return any(camera.lens_facing is lens_facing for camera in self.cameras)

    def select_camera(self, lens_facing: LensFacing) -> CameraDevice:
        for camera in self.cameras:
            if camera.lens_facing is lens_facing:
                return camera
        raise BindError(f"No {lens_facing.value} facing camera available")

    def pipeline_description(self, camera: CameraDevice, configuration: CameraConfiguration) -> str:
        aspect = configuration.aspect_ratio
        preview_width, preview_height = PREVIEW_SIZES[aspect]
        analysis_width, analysis_height = ANALYSIS_SIZES[aspect]
        preview_rotation = relative_rotation(camera.sensor_rotation,
                                             configuration.rotation_degrees,
                                             camera.lens_facing)
        flip_method = _VIDEOFLIP_METHODS.get(preview_rotation, 'auto')

        source = f"pipewiresrc name=source target-object={camera.object_id}"
        if self.pipewire_fd is not None:
            source += f" fd={self.pipewire_fd}"

        return (
            f"{source} ! videoconvert ! "
            f"aspectratiocrop aspect-ratio={aspect.numerator}/{aspect.denominator} ! tee name=t "
            "t. ! queue ! videoscale ! "
            f"video/x-raw,width={preview_width},height={preview_height} ! "
            f"videoflip method={flip_method} ! "
            "glsinkbin sink=\"gtk4paintablesink name=gtk_sink\" name=sink_bin "
            "t. ! queue leaky=downstream max-size-buffers=1 ! videoscale ! "
            f"video/x-raw,width={analysis_width},height={analysis_height} ! "
            "videoconvert ! video/x-raw,format=RGB ! "
            "appsink name=app_sink max-buffers=1 drop=true emit-signals=true sync=false"
        )

    def bind(self, configuration: CameraConfiguration,
             frame_callback: Callable[[Frame], None]) -> CameraHandle:
        camera = self.select_camera(configuration.lens_facing)
        pipeline_desc = self.pipeline_description(camera, configuration)

        logger.debug(f"Creating pipeline: {pipeline_desc}")
        try:
            pipeline = Gst.parse_launch(pipeline_desc)
        except Exception as e:
            raise BindError(f"Failed to create pipeline: {e}") from e

        appsink = pipeline.get_by_name("app_sink")
        viewfinder_sink = pipeline.get_by_name("sink_bin")
        if not appsink or not viewfinder_sink:
            pipeline.set_state(Gst.State.NULL)
            raise BindError("Pipeline is missing its preview or analysis sink")

        self.pipeline = pipeline
        self.appsink = appsink
        self.viewfinder_sink = viewfinder_sink
        self.frame_callback = frame_callback
        self.frame_rotation = relative_rotation(camera.sensor_rotation,
                                                configuration.rotation_degrees,
                                                camera.lens_facing)
        appsink.connect("new-sample", self._on_new_sample)

        paintable = self._preview_paintable()

        ret = pipeline.set_state(Gst.State.PLAYING)
        if ret == Gst.StateChangeReturn.FAILURE:
            message = self._pop_error()
            self.unbind_all()
            raise BindError(f"Failed to start camera pipeline: {message}")

        return CameraHandle(camera, configuration, paintable)

    def _preview_paintable(self):
        gtk4_sink = self.viewfinder_sink.get_property("sink")
        if not gtk4_sink:
            raise BindError("Failed to get gtk4paintablesink from glsinkbin")
        paintable = gtk4_sink.get_property("paintable")
        if not paintable:
            raise BindError("No paintable available from gtk4paintablesink")
        return paintable

    def _pop_error(self) -> str:
        bus = self.pipeline.get_bus() if self.pipeline else None
        if bus:
            msg = bus.timed_pop_filtered(0, Gst.MessageType.ERROR)
            if msg:
                err, debug = msg.parse_error()
                return f"{err.message} ({debug})"
        return "unknown error"

    def _on_new_sample(self, appsink):
        sample = appsink.emit("pull-sample")
        if sample is None or self.frame_callback is None:
            return Gst.FlowReturn.OK

        try:
            frame = GstFrame(sample, self.frame_rotation)
        except Exception as e:
            logger.warning(f"Error processing frame: {e}")
            return Gst.FlowReturn.OK

        self.frame_callback(frame)
        return Gst.FlowReturn.OK

    def unbind_all(self):
        self.frame_callback = None
        if self.pipeline:
            logger.debug("Stopping camera pipeline")
            self.pipeline.set_state(Gst.State.NULL)
        self.pipeline = None
        self.appsink = None
        self.viewfinder_sink = None
